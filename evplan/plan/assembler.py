# Merge a decoded plan body with its citations, then audit the result.
#
# assemble_plan() only checks that present values have the right JSON shape;
# a missing field stays None. audit_plan() runs the semantic checks
# (non-negative numbers, cost arithmetic, enum membership) and reports them
# as a list of issues instead of failing.

from __future__ import annotations
import math
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError

from evplan.errors import MalformedResponse
from evplan.log import get_logger
from .schema import BATTERY_CHEMISTRIES, REQUIRED_FIELDS, RISK_SEVERITIES
from .types import Citation, ConversionPlan

logger = get_logger("evplan.assembler")

COST_TOLERANCE = 0.01


def assemble_plan(body: Dict[str, Any], citations: Sequence[Citation] = ()) -> ConversionPlan:
    """Build a ConversionPlan; `citations` is omitted when empty."""
    merged = dict(body)
    merged["citations"] = list(citations) if citations else None
    try:
        return ConversionPlan.model_validate(merged)
    except ValidationError as e:
        logger.warning("Plan body does not match the expected shape: %s", e.errors(include_url=False))
        raise MalformedResponse("Plan body has fields of the wrong type.", cause=e) from e


def _check_non_negative(issues: List[str], label: str, value: Optional[float]) -> None:
    if value is None:
        return
    if not math.isfinite(value):
        issues.append(f"{label} is not a finite number ({value})")
    elif value < 0:
        issues.append(f"{label} is negative ({value})")


def audit_plan(plan: ConversionPlan) -> List[str]:
    """Return human-readable issues found in `plan`; empty means clean."""
    issues: List[str] = []

    for name in REQUIRED_FIELDS:
        if getattr(plan, name) is None:
            issues.append(f"missing field: {name}")

    if plan.vehicle is not None:
        _check_non_negative(issues, "vehicle.year", plan.vehicle.year)
    if plan.drivetrain is not None:
        _check_non_negative(issues, "drivetrain.gearRatio", plan.drivetrain.gearRatio)

    if plan.battery is not None:
        b = plan.battery
        if b.chemistry is not None and b.chemistry not in BATTERY_CHEMISTRIES:
            issues.append(f"battery.chemistry {b.chemistry!r} not one of {', '.join(BATTERY_CHEMISTRIES)}")
        _check_non_negative(issues, "battery.voltage", b.voltage)
        _check_non_negative(issues, "battery.capacity_kWh", b.capacity_kWh)

    if plan.safety is not None:
        for i, risk in enumerate(plan.safety.risks or []):
            if risk.severity is not None and risk.severity not in RISK_SEVERITIES:
                issues.append(f"safety.risks[{i}].severity {risk.severity!r} not one of {', '.join(RISK_SEVERITIES)}")

    for i, item in enumerate(plan.bom or []):
        _check_non_negative(issues, f"bom[{i}].qty", item.qty)
        _check_non_negative(issues, f"bom[{i}].unitCost", item.unitCost)

    _check_non_negative(issues, "laborHours", plan.laborHours)

    if plan.cost is not None:
        c = plan.cost
        for label in ("parts", "labor", "overhead", "total"):
            _check_non_negative(issues, f"cost.{label}", getattr(c, label))
        expected = c.expected_total
        if expected is not None and c.total is not None and abs(c.total - expected) > COST_TOLERANCE:
            issues.append(f"cost.total {c.total} != parts + labor + overhead ({expected})")

    for issue in issues:
        logger.warning("Plan audit: %s", issue)
    return issues
