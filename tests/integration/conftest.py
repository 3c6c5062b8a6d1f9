"""Integration test fixtures with a real database."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession

from transport_payroll.calculators.aggregator import PayrollAggregator
from transport_payroll.calculators.types import TimeEntryStatus
from transport_payroll.config import Settings
from transport_payroll.models import Agreement, Employee, TimeEntry
from transport_payroll.services.absence_service import AbsenceService
from transport_payroll.services.payroll_service import PayrollService
from transport_payroll.services.time_entry_service import TimeEntryService


@pytest_asyncio.fixture
async def db_agreement(db_session: AsyncSession) -> Agreement:
    """Driver agreement 2025-2028 with the unit-test rates."""
    agreement = Agreement(
        agreement_type="DRIVER_AGREEMENT",
        name="Transport- og Logistikoverenskomst 2025-2028",
        base_hourly_rate=Decimal("150.00"),
        overtime_tier1_rate=Decimal("60.00"),
        overtime_tier2_rate=Decimal("90.00"),
        night_rate=Decimal("25.00"),
        weekend_premium_percent=Decimal("50"),
        holiday_premium_percent=Decimal("100"),
        special_allowance_percent=Decimal("6.75"),
        pension_employer_percent=Decimal("8"),
        pension_employee_percent=Decimal("4"),
        vacation_percent=Decimal("12.5"),
        weekly_hours=Decimal("37"),
        vacation_days_per_year=25,
        valid_from=date(2025, 3, 1),
        valid_to=date(2028, 2, 29),
        is_active=True,
    )
    db_session.add(agreement)
    await db_session.flush()
    return agreement


@pytest_asyncio.fixture
async def db_employee(db_session: AsyncSession, db_agreement: Agreement) -> Employee:
    """Licensed medium-vehicle driver earning 150/h (1221.00 per standard day)."""
    employee = Employee(
        employee_number="1001",
        first_name="Mads",
        last_name="Jensen",
        job_category="DRIVER",
        agreement_type="DRIVER_AGREEMENT",
        work_time_type="HOURLY",
        base_hourly_rate=Decimal("150.00"),
        employment_date=date(2020, 1, 1),
        seniority_months=0,
        has_driver_license=True,
        driver_license_number="DK-123456",
        vehicle_weight_class="MEDIUM",
    )
    db_session.add(employee)
    await db_session.flush()
    return employee


@pytest.fixture
def add_entry(
    db_session: AsyncSession, db_employee: Employee
) -> Callable[..., Awaitable[TimeEntry]]:
    """Factory storing a time entry given as local wall-clock times."""

    async def _add(
        work_date: date,
        start: str = "07:00",
        end: str = "15:30",
        break_minutes: int = 30,
        status: TimeEntryStatus = TimeEntryStatus.APPROVED,
        **overrides: Any,
    ) -> TimeEntry:
        start_time = datetime.combine(work_date, time.fromisoformat(start))
        end_time = datetime.combine(work_date, time.fromisoformat(end))
        if end_time <= start_time:
            end_time += timedelta(days=1)
        entry = TimeEntry(
            employee_id=db_employee.employee_id,
            work_date=work_date,
            start_time=start_time,
            end_time=end_time,
            break_minutes=break_minutes,
            status=status.value,
            **overrides,
        )
        db_session.add(entry)
        await db_session.flush()
        return entry

    return _add


@pytest.fixture
def payroll_service(db_session: AsyncSession, settings: Settings) -> PayrollService:
    return PayrollService(db_session, PayrollAggregator(settings))


@pytest.fixture
def time_entry_service(db_session: AsyncSession) -> TimeEntryService:
    return TimeEntryService(db_session)


@pytest.fixture
def absence_service(db_session: AsyncSession) -> AbsenceService:
    return AbsenceService(db_session)
