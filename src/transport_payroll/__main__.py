"""Command line interface.

Usage:
    python -m transport_payroll preview period.json
    python -m transport_payroll holidays 2025
    python -m transport_payroll init-db

The preview file holds one employee, one agreement and the time entries:

    {
      "period_start": "2025-06-01",
      "period_end": "2025-06-30",
      "employee": {"employee_id": "E1", "job_category": "DRIVER", ...},
      "agreement": {"agreement_type": "DRIVER_AGREEMENT", "name": "...", ...},
      "entries": [{"entry_id": "T1", "work_date": "2025-06-02", ...}]
    }
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
import types
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, Callable, TypeVar, Union, get_args, get_origin, get_type_hints

from transport_payroll.calculators.aggregator import PayrollAggregator
from transport_payroll.calculators.holidays import holidays_for_year
from transport_payroll.calculators.types import (
    AgreementSnapshot,
    EmployeeSnapshot,
    TimeEntryRecord,
)
from transport_payroll.calculators.validation import CalculationError
from transport_payroll.config import get_settings
from transport_payroll.database import create_schema, dispose_db

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _coerce(tp: Any, value: Any) -> Any:
    """Convert a JSON value to the annotated field type."""
    if value is None:
        return None
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        (inner,) = [arg for arg in get_args(tp) if arg is not type(None)]
        return _coerce(inner, value)
    if tp is Decimal:
        return Decimal(str(value))
    if tp is datetime:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    if tp is date:
        return date.fromisoformat(value)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return tp(value)
    return value


def from_json(cls: type[T], data: dict[str, Any]) -> T:
    """Build a snapshot dataclass from a JSON object, ignoring unknown keys."""
    hints = get_type_hints(cls)
    names = {f.name for f in dataclasses.fields(cls)}
    unknown = set(data) - names
    if unknown:
        logger.warning("Ignoring unknown %s fields: %s", cls.__name__, ", ".join(sorted(unknown)))
    return cls(**{k: _coerce(hints[k], v) for k, v in data.items() if k in names})


class PayrollCli:
    """Transport payroll command line interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="python -m transport_payroll",
            description="Transport and logistics payroll rule engine",
        )
        parser.add_argument(
            "--log-level",
            type=str,
            help="Logging level (default: $LOG_LEVEL or INFO)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        preview = subparsers.add_parser(
            "preview",
            help="Calculate a payroll period from a JSON file",
        )
        preview.add_argument("file", type=Path, help="JSON file with employee, agreement and entries")

        holidays = subparsers.add_parser(
            "holidays",
            help="List Danish public holidays for a year",
        )
        holidays.add_argument("year", type=int, help="Calendar year")

        subparsers.add_parser(
            "init-db",
            help="Create the database tables at $DATABASE_URL",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        settings = get_settings()
        logging.basicConfig(
            level=(parsed.log_level or settings.log_level).upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

        if not parsed.command:
            self.parser.print_help()
            return 1

        handlers: dict[str, Callable[[argparse.Namespace], int]] = {
            "preview": self._cmd_preview,
            "holidays": self._cmd_holidays,
            "init-db": self._cmd_init_db,
        }
        return handlers[parsed.command](parsed)

    def _cmd_preview(self, args: argparse.Namespace) -> int:
        """Calculate a payroll period and print it as JSON."""
        try:
            data = json.loads(args.file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            print(f"ERROR: cannot read {args.file}: {e}", file=sys.stderr)
            return 1

        try:
            employee = from_json(EmployeeSnapshot, data["employee"])
            agreement = from_json(AgreementSnapshot, data["agreement"])
            entries = [from_json(TimeEntryRecord, e) for e in data.get("entries", [])]
            period_start = date.fromisoformat(data["period_start"])
            period_end = date.fromisoformat(data["period_end"])
        except (KeyError, TypeError, ValueError) as e:
            print(f"ERROR: invalid input: {e}", file=sys.stderr)
            return 1

        try:
            result = PayrollAggregator().calculate(
                employee, agreement, entries, period_start, period_end
            )
        except CalculationError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1

        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
        return 0

    def _cmd_holidays(self, args: argparse.Namespace) -> int:
        for holiday in holidays_for_year(args.year):
            suffix = " (half day)" if holiday.is_half_day else ""
            print(f"{holiday.day.isoformat()}  {holiday.name}{suffix}")
        return 0

    def _cmd_init_db(self, args: argparse.Namespace) -> int:
        async def _create() -> None:
            try:
                await create_schema()
            finally:
                await dispose_db()

        asyncio.run(_create())
        logger.info("Database schema created at %s", get_settings().database_url)
        return 0


def main() -> int:
    """CLI entry point."""
    cli = PayrollCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
