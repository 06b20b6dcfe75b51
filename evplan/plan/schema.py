# Declarative shape of a conversion plan, handed to the generation
# collaborator as an output constraint. Pure data: nothing here runs
# against a response. Decoding and checking happen in decoder/assembler.

from __future__ import annotations
import copy
import json
from typing import Any, Dict

BATTERY_CHEMISTRIES = ("LFP", "NMC", "LTO")
RISK_SEVERITIES = ("LOW", "MEDIUM", "HIGH")

REQUIRED_FIELDS = (
    "summary",
    "vehicle",
    "drivetrain",
    "battery",
    "safety",
    "bom",
    "laborHours",
    "cost",
)

CONVERSION_PLAN_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "summary": {
            "type": "string",
            "description": "A human-readable summary of the conversion plan.",
        },
        "vehicle": {
            "type": "object",
            "properties": {
                "make": {"type": "string"},
                "model": {"type": "string"},
                "year": {"type": "integer"},
            },
            "required": ["make", "model", "year"],
        },
        "drivetrain": {
            "type": "object",
            "properties": {
                "motor": {"type": "string"},
                "inverter": {"type": "string"},
                "gearRatio": {"type": "number"},
            },
            "required": ["motor", "inverter", "gearRatio"],
        },
        "battery": {
            "type": "object",
            "properties": {
                "chemistry": {"type": "string", "enum": list(BATTERY_CHEMISTRIES)},
                "voltage": {"type": "number"},
                "capacity_kWh": {"type": "number"},
                "packLayout": {"type": "string"},
            },
            "required": ["chemistry", "voltage", "capacity_kWh", "packLayout"],
        },
        "safety": {
            "type": "object",
            "properties": {
                "standards": {"type": "array", "items": {"type": "string"}},
                "risks": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "code": {"type": "string"},
                            "severity": {"type": "string", "enum": list(RISK_SEVERITIES)},
                            "remediation": {"type": "string"},
                        },
                        "required": ["code", "severity", "remediation"],
                    },
                },
            },
            "required": ["standards", "risks"],
        },
        "bom": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "sku": {"type": "string"},
                    "qty": {"type": "number"},
                    "unitCost": {"type": "number"},
                    "description": {"type": "string"},
                },
                "required": ["sku", "qty", "unitCost"],
            },
        },
        "laborHours": {"type": "number"},
        "cost": {
            "type": "object",
            "properties": {
                "parts": {"type": "number"},
                "labor": {"type": "number"},
                "overhead": {"type": "number"},
                "total": {"type": "number"},
            },
            "required": ["parts", "labor", "total"],
        },
    },
    "required": list(REQUIRED_FIELDS),
}


def schema_as_json(indent: int | None = None) -> str:
    return json.dumps(CONVERSION_PLAN_SCHEMA, indent=indent)


def to_gemini_schema(schema: Dict[str, Any] | None = None) -> Dict[str, Any]:
    """
    Return a copy of the schema in Gemini's OpenAPI dialect,
    where type names are upper-case ("OBJECT", "STRING", ...).
    """
    out = copy.deepcopy(schema if schema is not None else CONVERSION_PLAN_SCHEMA)

    def _walk(node: Any) -> None:
        if isinstance(node, dict):
            t = node.get("type")
            if isinstance(t, str):
                node["type"] = t.upper()
            for child in (node.get("properties") or {}).values():
                _walk(child)
            if "items" in node:
                _walk(node["items"])

    _walk(out)
    return out
