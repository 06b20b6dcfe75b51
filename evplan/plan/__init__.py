# Plan package
# Schema, response decoding, citation normalization and plan assembly.

from .types import ConversionPlan, Citation, BOMItem, SafetyRisk
from .schema import CONVERSION_PLAN_SCHEMA
from .decoder import decode_response
from .citations import normalize_citations
from .assembler import assemble_plan, audit_plan

__all__ = [
    "ConversionPlan",
    "Citation",
    "BOMItem",
    "SafetyRisk",
    "CONVERSION_PLAN_SCHEMA",
    "decode_response",
    "normalize_citations",
    "assemble_plan",
    "audit_plan",
]
