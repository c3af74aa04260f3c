"""
Email Service using Resend

Handles sending login links and admissions status updates.
"""

import asyncio
import logging
from html import escape

import resend

from app.core.config import settings

logger = logging.getLogger(__name__)

# Initialize Resend with API key
resend.api_key = settings.resend_api_key

STATUS_UPDATE_SUBJECT = f"{settings.organization_name} Status Update"
LOGIN_SUBJECT = "Welcome to Rodeo!"

TESTING_WARNING = """
    <h1>
        WARNING: This email was sent from a testing environment.
        Be careful when opening any links or attachments!
        This message cannot be guaranteed to come from {organization}.
    </h1>
"""


async def send_email(
    to_email: str,
    subject: str,
    html_content: str,
) -> bool:
    """
    Send an email using Resend.

    Args:
        to_email: Recipient email address
        subject: Email subject line
        html_content: HTML content of the email

    Returns:
        True if email was sent successfully
    """
    if settings.is_staging and not to_email.endswith(f"@{settings.staging_email_domain}"):
        logger.warning(
            f"Refusing to email {to_email} from staging: only "
            f"@{settings.staging_email_domain} addresses are allowed"
        )
        return False

    if not resend.api_key:
        logger.warning("RESEND_API_KEY not set - logging email instead of sending")
        logger.info(f"EMAIL TO: {to_email} | SUBJECT: {subject}")
        return True

    try:
        params: resend.Emails.SendParams = {
            "from": settings.email_from,
            "to": [to_email],
            "subject": subject,
            "html": html_content,
        }

        # Run sync Resend call in thread pool to avoid blocking event loop
        email = await asyncio.to_thread(resend.Emails.send, params)
        logger.info(f"Email sent successfully to {to_email}, id: {email['id']}")
        return True
    except Exception as e:
        logger.error(f"Failed to send email to {to_email} (subject: {subject}): {e}")
        return False


def render_message(message_html: str, name: str | None) -> str:
    """
    Wrap a message body with greeting, contact footer and signature.

    Non-production environments prepend a testing warning.

    Args:
        message_html: Body HTML (trusted, admin or system authored)
        name: Recipient's preferred name for the greeting, if known

    Returns:
        Complete HTML email body
    """
    organization = escape(settings.organization_name)
    contact = escape(settings.contact_email)

    warning = "" if settings.is_production else TESTING_WARNING.format(organization=organization)
    greeting = f"Hi {escape(name)}," if name else "Hi,"

    return f"""
    {warning}
    <p>{greeting}</p>
    {message_html}
    <p>
        If you have any questions, you may email us at
        <a href="mailto:{contact}">{contact}</a>.
    </p>
    <p>Best,<br>{organization}</p>
    """


async def send_login_link(to_email: str, magic_link: str) -> bool:
    """Send a magic login link to a newly registered or returning user."""
    link = f"{settings.frontend_url}/login/{magic_link}"
    message = f"""
    <p>Please click on this link to log in to Rodeo: <a href="{link}">{link}</a></p>
    <p>
        Keep this email safe as anyone with this link can log in to your account.
        If you misplace this email, you can always request a new link by registering
        again with this same email address. Note that this will invalidate your previous link.
    </p>
    """
    return await send_email(
        to_email=to_email,
        subject=LOGIN_SUBJECT,
        html_content=render_message(message, None),
    )


async def send_status_update(to_email: str, name: str | None, template: str) -> bool:
    """
    Notify an applicant that their admissions status changed.

    Args:
        to_email: Applicant's email
        name: Applicant's preferred name
        template: Current acceptance template from the admissions settings

    Returns:
        True if the email was delivered to the transport
    """
    return await send_email(
        to_email=to_email,
        subject=STATUS_UPDATE_SUBJECT,
        html_content=render_message(template, name),
    )
