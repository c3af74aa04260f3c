"""
Magic Link Credentials

Generation and hashing of the magic links used for passwordless login.
Only the SHA-256 hash of a link is ever persisted.
"""

import hashlib
import secrets
import string

MAGIC_LINK_LENGTH = 32
MAGIC_LINK_CHARSET = string.ascii_lowercase


def generate_magic_link() -> str:
    """
    Generate a new random magic link.

    Returns:
        A 32 character lowercase string from a CSPRNG
    """
    return "".join(secrets.choice(MAGIC_LINK_CHARSET) for _ in range(MAGIC_LINK_LENGTH))


def hash_magic_link(magic_link: str) -> str:
    """
    Hash a magic link for storage and lookup.

    Args:
        magic_link: The plain link presented by the client

    Returns:
        Hex-encoded SHA-256 hash of the link
    """
    return hashlib.sha256(magic_link.encode()).hexdigest()
