# ===============================================
# tests/test_plan.py
# Schema shape, plan assembly and plan audit
# ===============================================

import pytest
from pydantic import ValidationError

from evplan.errors import MalformedResponse
from evplan.plan import assemble_plan, audit_plan, normalize_citations
from evplan.plan.schema import (
    BATTERY_CHEMISTRIES,
    CONVERSION_PLAN_SCHEMA,
    REQUIRED_FIELDS,
    RISK_SEVERITIES,
    schema_as_json,
    to_gemini_schema,
)


# --- schema ---

def test_schema_lists_required_top_level_fields():
    assert tuple(CONVERSION_PLAN_SCHEMA["required"]) == REQUIRED_FIELDS
    assert set(CONVERSION_PLAN_SCHEMA["properties"]) == set(REQUIRED_FIELDS)
    assert "citations" not in CONVERSION_PLAN_SCHEMA["properties"]


def test_schema_enums_and_optional_fields():
    props = CONVERSION_PLAN_SCHEMA["properties"]
    assert props["battery"]["properties"]["chemistry"]["enum"] == list(BATTERY_CHEMISTRIES)
    risk = props["safety"]["properties"]["risks"]["items"]
    assert risk["properties"]["severity"]["enum"] == list(RISK_SEVERITIES)
    assert "overhead" not in props["cost"]["required"]
    assert "description" not in props["bom"]["items"]["required"]


def test_gemini_dialect_uppercases_types_without_touching_original():
    g = to_gemini_schema()
    assert g["type"] == "OBJECT"
    assert g["properties"]["bom"]["items"]["properties"]["qty"]["type"] == "NUMBER"
    assert g["properties"]["safety"]["properties"]["standards"]["items"]["type"] == "STRING"
    assert CONVERSION_PLAN_SCHEMA["type"] == "object"
    assert '"laborHours"' in schema_as_json()


# --- assembly ---

def test_assemble_sets_citations(plan_body, mixed_chunks):
    citations = normalize_citations(mixed_chunks)
    plan = assemble_plan(plan_body, citations)

    assert plan.summary == plan_body["summary"]
    assert plan.vehicle.make == "Volkswagen"
    assert plan.battery.chemistry == "LFP"
    assert [c.uri for c in plan.citations] == [c.uri for c in citations]


def test_empty_citations_are_omitted(plan_body):
    plan = assemble_plan(plan_body, [])
    assert plan.citations is None
    assert "citations" not in plan.to_json_dict()


def test_assemble_is_idempotent(plan_body, mixed_chunks):
    citations = normalize_citations(mixed_chunks)
    assert assemble_plan(plan_body, citations) == assemble_plan(plan_body, citations)


def test_missing_fields_are_absent_not_fatal():
    plan = assemble_plan({"summary": "only a summary"})
    assert plan.summary == "only a summary"
    assert plan.vehicle is None
    assert plan.cost is None
    assert plan.bom_total == 0.0


def test_wrong_types_raise_malformed(plan_body):
    plan_body["vehicle"]["year"] = "sometime in the seventies"
    with pytest.raises(MalformedResponse):
        assemble_plan(plan_body)


def test_plan_is_frozen(plan_body):
    plan = assemble_plan(plan_body)
    with pytest.raises(ValidationError):
        plan.summary = "changed"


def test_derived_totals(plan_body):
    plan = assemble_plan(plan_body)
    assert plan.bom[1].line_total == 30 * 180.0
    assert plan.bom_total == 4200.0 + 30 * 180.0
    assert plan.cost.expected_total == 16500.0


# --- audit ---

def test_sample_plan_is_clean(plan_body):
    assert audit_plan(assemble_plan(plan_body)) == []


def test_cost_mismatch_is_reported(plan_body):
    plan_body["cost"]["total"] = 99.0
    issues = audit_plan(assemble_plan(plan_body))
    assert any("cost.total" in i for i in issues)


def test_non_finite_total_is_reported(plan_body):
    plan_body["cost"]["total"] = float("nan")
    issues = audit_plan(assemble_plan(plan_body))
    assert any("cost.total is not a finite number" in i for i in issues)


def test_overhead_defaults_to_zero(plan_body):
    del plan_body["cost"]["overhead"]
    plan_body["cost"]["total"] = 16000.0
    assert audit_plan(assemble_plan(plan_body)) == []


def test_enum_and_sign_violations_are_reported(plan_body):
    plan_body["battery"]["chemistry"] = "LEAD_ACID"
    plan_body["safety"]["risks"][0]["severity"] = "CRITICAL"
    plan_body["bom"][0]["qty"] = -1
    plan_body["laborHours"] = -5
    issues = audit_plan(assemble_plan(plan_body))

    assert any("battery.chemistry" in i for i in issues)
    assert any("safety.risks[0].severity" in i for i in issues)
    assert any("bom[0].qty" in i for i in issues)
    assert any("laborHours" in i for i in issues)


def test_missing_required_fields_are_reported():
    issues = audit_plan(assemble_plan({"summary": "x"}))
    assert "missing field: vehicle" in issues
    assert "missing field: summary" not in issues
