"""Entitlement calculators for absences, leave and specialised pay."""

from transport_payroll.entitlements.base import (
    AbsenceRecord,
    AbsenceUsageLedger,
    EntitlementCalculator,
    UsageLookup,
    apply_guarantee_floor,
    daily_pay,
)
from transport_payroll.entitlements.child_care import ChildCareCalculator, ChildCareType
from transport_payroll.entitlements.cross_border import CrossBorderCalculator, TripType
from transport_payroll.entitlements.maternity import MaternityLeaveCalculator, ParentalLeaveType
from transport_payroll.entitlements.sickness import SicknessCalculator
from transport_payroll.entitlements.warehouse_terminal import (
    GeographicZone,
    LoadingUnit,
    TemperatureZone,
    TerminalType,
    WarehouseTerminalCalculator,
)
from transport_payroll.entitlements.waste_collection import (
    ContainerCollection,
    ContainerType,
    RouteDifficulty,
    WasteCollectionCalculator,
    WeatherCondition,
)
from transport_payroll.entitlements.competence_development import (
    CompetenceDevelopmentCalculator,
    EducationType,
)

__all__ = [
    "AbsenceRecord",
    "AbsenceUsageLedger",
    "ChildCareCalculator",
    "ChildCareType",
    "CompetenceDevelopmentCalculator",
    "ContainerCollection",
    "ContainerType",
    "CrossBorderCalculator",
    "EducationType",
    "EntitlementCalculator",
    "GeographicZone",
    "LoadingUnit",
    "MaternityLeaveCalculator",
    "ParentalLeaveType",
    "RouteDifficulty",
    "SicknessCalculator",
    "TemperatureZone",
    "TerminalType",
    "TripType",
    "UsageLookup",
    "WarehouseTerminalCalculator",
    "WasteCollectionCalculator",
    "WeatherCondition",
    "apply_guarantee_floor",
    "daily_pay",
]
