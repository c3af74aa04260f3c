"""
Unit tests for the admissions and user repository layers.

These tests compile the statements each function executes and check the
storage guarantees they carry:
- Releasing reads the decision from the row it deletes, then writes the
  user's status with a compare-and-set
- Staging is a single upsert keyed by user
- Scanning is a single increment with no read beforehand
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.dialects import postgresql

from app.modules.admissions import repository
from app.modules.admissions.models import DecisionStatus
from app.modules.users.models import UserStatus
from app.modules.users.repository import UserRepository


def _compile(stmt, **kwargs):
    return stmt.compile(dialect=postgresql.dialect(), **kwargs)


def _sql(stmt, **kwargs) -> str:
    return " ".join(str(_compile(stmt, **kwargs)).replace('"', "").split())


def _executed(mock_db) -> list:
    return [call.args[0] for call in mock_db.execute.await_args_list]


def _result(**values):
    result = MagicMock()
    for name, value in values.items():
        getattr(result, name).return_value = value
    return result


class TestApplyDecision:
    """Tests for apply_decision."""

    @pytest.mark.asyncio
    async def test_status_comes_from_deleted_row(self, mock_db, make_user):
        """A decision re-staged after it was read is released with its new status."""
        user = make_user(user_id=5, status=UserStatus.REJECTED)
        mock_db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=DecisionStatus.REJECTED),
                _result(scalar_one_or_none=user),
            ]
        )

        assert await repository.apply_decision(mock_db, 7, 5) is user

        delete_stmt, update_stmt = _executed(mock_db)
        delete_sql = _sql(delete_stmt)
        assert delete_sql.startswith("DELETE FROM decisions WHERE decisions.id =")
        assert "RETURNING decisions.status" in delete_sql
        assert _compile(delete_stmt).params == {"id_1": 7}

        update_sql = _sql(update_stmt)
        assert update_sql.startswith("UPDATE users SET")
        assert "status=" in update_sql
        assert "users.status IN" in update_sql
        assert _compile(update_stmt).params["status"] == UserStatus.REJECTED

    @pytest.mark.asyncio
    async def test_removed_decision_writes_nothing(self, mock_db):
        """A decision removed after it was read does not touch the user."""
        mock_db.execute = AsyncMock(return_value=_result(scalar_one_or_none=None))

        assert await repository.apply_decision(mock_db, 7, 5) is None

        statements = _executed(mock_db)
        assert len(statements) == 1
        assert _sql(statements[0]).startswith("DELETE FROM decisions")

    @pytest.mark.asyncio
    async def test_decision_deleted_when_status_moved(self, mock_db):
        mock_db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=DecisionStatus.ACCEPTED),
                _result(scalar_one_or_none=None),
            ]
        )

        assert await repository.apply_decision(mock_db, 7, 5) is None

        delete_stmt, update_stmt = _executed(mock_db)
        assert _sql(delete_stmt).startswith("DELETE FROM decisions")
        assert _sql(update_stmt).startswith("UPDATE users")

    @pytest.mark.asyncio
    async def test_only_releasable_statuses_are_updated(self, mock_db):
        mock_db.execute = AsyncMock(
            side_effect=[
                _result(scalar_one_or_none=DecisionStatus.ACCEPTED),
                _result(scalar_one_or_none=None),
            ]
        )

        await repository.apply_decision(mock_db, 7, 5)

        params = _compile(_executed(mock_db)[1]).params
        in_values = next(v for v in params.values() if isinstance(v, list))
        assert set(in_values) == {UserStatus.APPLIED, UserStatus.WAITLISTED}


class TestUpsertDecision:
    """Tests for upsert_decision."""

    @pytest.mark.asyncio
    async def test_single_upsert_keyed_by_user(self, mock_db, make_decision):
        decision = make_decision(3, DecisionStatus.WAITLISTED)
        mock_db.execute = AsyncMock(return_value=_result(scalar_one=decision))

        assert await repository.upsert_decision(mock_db, 3, DecisionStatus.WAITLISTED) is decision

        statements = _executed(mock_db)
        assert len(statements) == 1
        sql = _sql(statements[0])
        assert sql.startswith("INSERT INTO decisions")
        assert "ON CONFLICT (user_id) DO UPDATE SET status" in sql
        mock_db.get.assert_not_called()


class TestDeleteDecisions:
    @pytest.mark.asyncio
    async def test_no_ids_executes_nothing(self, mock_db):
        assert await repository.delete_decisions_for_users(mock_db, []) == 0
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_deletes_by_user(self, mock_db):
        mock_db.execute = AsyncMock(return_value=MagicMock(rowcount=2))

        assert await repository.delete_decisions_for_users(mock_db, [1, 2, 2]) == 2

        sql = _sql(_executed(mock_db)[0])
        assert sql.startswith("DELETE FROM decisions WHERE decisions.user_id IN")


class TestIncrementScan:
    """Tests for UserRepository.increment_scan."""

    @pytest.mark.asyncio
    async def test_single_atomic_increment(self, mock_db):
        mock_db.execute = AsyncMock(return_value=_result(scalar_one=4))

        assert await UserRepository.increment_scan(mock_db, 1, "lunch") == 4

        statements = _executed(mock_db)
        assert len(statements) == 1
        sql = _sql(statements[0], compile_kwargs={"literal_binds": True})
        assert sql.startswith("INSERT INTO scan_counts")
        assert "ON CONFLICT (user_id, action) DO UPDATE SET count" in sql
        assert "scan_counts.count + 1" in sql
        assert "RETURNING scan_counts.count" in sql
        mock_db.get.assert_not_called()


class TestCompareAndSetStatus:
    @pytest.mark.asyncio
    async def test_update_is_conditional_on_expected_status(self, mock_db):
        mock_db.execute = AsyncMock(return_value=MagicMock(rowcount=0))

        updated = await UserRepository.compare_and_set_status(
            mock_db, 1, [UserStatus.ACCEPTED], UserStatus.CONFIRMED
        )

        assert updated is False
        sql = _sql(_executed(mock_db)[0])
        assert sql.startswith("UPDATE users SET")
        assert "users.id =" in sql
        assert "users.status IN" in sql
