# Typed view of a conversion plan document.
# Field names mirror the JSON the model produces (camelCase kept on purpose
# so a decoded body validates without aliasing). Every field is optional:
# the generator is asked for all of them, but consumers must render
# missing values as absent rather than crash.

from __future__ import annotations
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class _PlanModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")


class Citation(BaseModel):
    """A grounding reference, built only by normalize_citations()."""
    model_config = ConfigDict(frozen=True)

    uri: str
    title: str


class Vehicle(_PlanModel):
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None


class Drivetrain(_PlanModel):
    motor: Optional[str] = None
    inverter: Optional[str] = None
    gearRatio: Optional[float] = None


class Battery(_PlanModel):
    chemistry: Optional[str] = None
    voltage: Optional[float] = None
    capacity_kWh: Optional[float] = None
    packLayout: Optional[str] = None


class SafetyRisk(_PlanModel):
    code: Optional[str] = None
    severity: Optional[str] = None
    remediation: Optional[str] = None


class Safety(_PlanModel):
    standards: Optional[List[str]] = None
    risks: Optional[List[SafetyRisk]] = None


class BOMItem(_PlanModel):
    sku: Optional[str] = None
    qty: Optional[float] = None
    unitCost: Optional[float] = None
    description: Optional[str] = None

    @property
    def line_total(self) -> Optional[float]:
        if self.qty is None or self.unitCost is None:
            return None
        return self.qty * self.unitCost


class Cost(_PlanModel):
    parts: Optional[float] = None
    labor: Optional[float] = None
    overhead: Optional[float] = None
    total: Optional[float] = None

    @property
    def expected_total(self) -> Optional[float]:
        """parts + labor + overhead, or None when parts/labor are missing."""
        if self.parts is None or self.labor is None:
            return None
        return self.parts + self.labor + (self.overhead or 0.0)


class ConversionPlan(_PlanModel):
    summary: Optional[str] = None
    vehicle: Optional[Vehicle] = None
    drivetrain: Optional[Drivetrain] = None
    battery: Optional[Battery] = None
    safety: Optional[Safety] = None
    bom: Optional[List[BOMItem]] = None
    laborHours: Optional[float] = None
    cost: Optional[Cost] = None
    citations: Optional[List[Citation]] = None

    @property
    def bom_total(self) -> float:
        """Sum of line totals; items missing qty or unit cost count as zero."""
        return sum(item.line_total or 0.0 for item in self.bom or [])

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)
