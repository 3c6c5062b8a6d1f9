"""Pytest fixtures for transport payroll tests."""

from __future__ import annotations

import itertools
from collections.abc import AsyncGenerator
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Callable

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from transport_payroll.calculators.types import (
    AgreementSnapshot,
    AgreementType,
    EmployeeSnapshot,
    JobCategory,
    TaskType,
    TimeEntryRecord,
    TimeEntryStatus,
    VehicleWeightClass,
)
from transport_payroll.config import Settings
from transport_payroll.models import Base

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def settings() -> Settings:
    """Settings independent of the environment."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        engine_version="1.0.0-test",
        timezone="Europe/Copenhagen",
        log_level="DEBUG",
        batch_workers=2,
    )


def driver_agreement(**overrides: Any) -> AgreementSnapshot:
    values: dict[str, Any] = {
        "agreement_type": AgreementType.DRIVER_AGREEMENT,
        "name": "Transport- og Logistikoverenskomst 2025-2028",
        "base_hourly_rate": Decimal("150.00"),
        "overtime_tier1_rate": Decimal("60.00"),
        "overtime_tier2_rate": Decimal("90.00"),
        "night_rate": Decimal("25.00"),
        "weekend_premium_percent": Decimal("50"),
        "holiday_premium_percent": Decimal("100"),
        "special_allowance_percent": Decimal("6.75"),
        "pension_employer_percent": Decimal("8"),
        "pension_employee_percent": Decimal("4"),
        "vacation_percent": Decimal("12.5"),
        "valid_from": date(2025, 3, 1),
        "valid_to": date(2028, 2, 29),
    }
    values.update(overrides)
    return AgreementSnapshot(**values)


@pytest.fixture
def agreement() -> AgreementSnapshot:
    """Driver agreement: 150/h base, 37 hour week."""
    return driver_agreement()


@pytest.fixture
def make_agreement() -> Callable[..., AgreementSnapshot]:
    return driver_agreement


@pytest.fixture
def make_employee() -> Callable[..., EmployeeSnapshot]:
    """Factory for a licensed medium-vehicle driver earning 150/h.

    With the 15.00 driver allowance the effective hourly wage is 165.00,
    so a standard 7.4 hour day pays 1221.00.
    """

    def _make(**overrides: Any) -> EmployeeSnapshot:
        values: dict[str, Any] = {
            "employee_id": "E1",
            "job_category": JobCategory.DRIVER,
            "agreement_type": AgreementType.DRIVER_AGREEMENT,
            "base_hourly_rate": Decimal("150.00"),
            "employment_date": date(2020, 1, 1),
            "has_driver_license": True,
            "driver_license_number": "DK-123456",
            "vehicle_weight_class": VehicleWeightClass.MEDIUM,
        }
        values.update(overrides)
        return EmployeeSnapshot(**values)

    return _make


@pytest.fixture
def employee(make_employee) -> EmployeeSnapshot:
    return make_employee()


@pytest.fixture
def make_entry() -> Callable[..., TimeEntryRecord]:
    """Factory for time entries given as local wall-clock times.

    An end time at or before the start time is taken to be on the next day.
    """
    counter = itertools.count(1)

    def _make(
        work_date: date,
        start: str = "07:00",
        end: str | None = "15:30",
        break_minutes: int = 30,
        employee_id: str = "E1",
        **overrides: Any,
    ) -> TimeEntryRecord:
        start_time = datetime.combine(work_date, time.fromisoformat(start))
        end_time = None
        if end is not None:
            end_time = datetime.combine(work_date, time.fromisoformat(end))
            if end_time <= start_time:
                end_time += timedelta(days=1)
        values: dict[str, Any] = {
            "entry_id": f"T{next(counter)}",
            "employee_id": employee_id,
            "work_date": work_date,
            "start_time": start_time,
            "end_time": end_time,
            "break_minutes": break_minutes,
            "task_type": TaskType.DRIVING,
            "status": TimeEntryStatus.APPROVED,
        }
        values.update(overrides)
        return TimeEntryRecord(**values)

    return _make


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    async with session_factory() as session:
        yield session
        await session.rollback()

    await engine.dispose()
