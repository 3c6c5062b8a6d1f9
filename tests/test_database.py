"""Tests for the session helpers in transport_payroll.database."""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from transport_payroll.config import get_settings
from transport_payroll.database import create_schema, dispose_db, get_session
from transport_payroll.models import Employee


@pytest_asyncio.fixture
async def configured_db(tmp_path, monkeypatch):
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'session.db'}")
    get_settings.cache_clear()
    await create_schema()
    yield
    await dispose_db()
    get_settings.cache_clear()


def _employee(number: str) -> Employee:
    return Employee(
        employee_number=number,
        first_name="Sofie",
        last_name="Nielsen",
        job_category="WAREHOUSE",
        agreement_type="WAREHOUSE_AGREEMENT",
        base_hourly_rate=Decimal("145.00"),
    )


async def _employee_count() -> int:
    async with get_session() as session:
        return await session.scalar(select(func.count()).select_from(Employee))


class TestGetSession:
    async def test_commits_on_success(self, configured_db):
        async with get_session() as session:
            session.add(_employee("2001"))

        assert await _employee_count() == 1

    async def test_rolls_back_on_error(self, configured_db):
        with pytest.raises(RuntimeError):
            async with get_session() as session:
                session.add(_employee("2002"))
                await session.flush()
                raise RuntimeError("boom")

        assert await _employee_count() == 0
