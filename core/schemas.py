import json
from dataclasses import dataclass
from typing import Any, Dict, Type, TypeVar
from pydantic import BaseModel, ValidationError
from model.hts import AnalysisResult, HeadingsEnvelope, ProvisionResult
from util.errors import BackendProtocolError

M = TypeVar("M", bound=BaseModel)


@dataclass(frozen=True)
class ResponseSchema:
    """
    One response contract: the JSON schema the backend is asked to honour and
    the pydantic model its answer is decoded into.
    """

    name: str
    json_schema: Dict[str, Any]
    model: Type[BaseModel]


_ANALYSIS_JSON: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "found": {
            "type": "boolean",
            "description": "Whether the HTS code was found under any derivative category.",
        },
        "matches": {
            "type": "array",
            "description": "A list of all specific derivative HTS categories or rules that this code falls under.",
            "items": {
                "type": "object",
                "properties": {
                    "derivativeCategory": {
                        "type": "string",
                        "description": "The specific name, ID, or header of the derivative category "
                        "(e.g., 'Aluminum Stranded Wire', 'Heading 7604').",
                    },
                    "metalType": {
                        "type": "string",
                        "enum": ["Aluminum", "Steel", "Both", "Unknown"],
                        "description": "The type of metal (Aluminum or Steel) associated with this specific match.",
                    },
                    "matchDetail": {
                        "type": "string",
                        "description": "Detailed extract or explanation of the specific rule/description "
                        "in the document that this code matches.",
                    },
                    "confidence": {
                        "type": "string",
                        "enum": ["High", "Medium", "Low"],
                        "description": "Confidence level: 'High' for direct code/range matches, 'Medium' for "
                        "broad category matches, 'Low' for inferred/ambiguous matches.",
                    },
                },
                "required": ["derivativeCategory", "metalType", "matchDetail", "confidence"],
            },
        },
        "reasoning": {
            "type": "string",
            "description": "A general summary of why the code matches or does not match.",
        },
    },
    "required": ["found", "matches", "reasoning"],
}

_PROVISION_JSON: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "found": {
            "type": "boolean",
            "description": "Whether the requested HTS provision/heading was found or defined in the text.",
        },
        "code": {
            "type": "string",
            "description": "The specific HTS code or Heading found (e.g. '9903.81.91').",
        },
        "metalType": {
            "type": "string",
            "description": "The metal type associated (Aluminum, Steel, or Both).",
        },
        "description": {
            "type": "string",
            "description": "The full detailed text, scope, rules, and notes associated with this "
            "provision in the document.",
        },
    },
    "required": ["found", "code", "metalType", "description"],
}

_HEADINGS_JSON: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "headings": {
            "type": "array",
            "description": "A list of all unique HTS Headings (4-digit) mentioned in the document.",
            "items": {
                "type": "object",
                "properties": {
                    "heading": {
                        "type": "string",
                        "description": "The 4-digit HTS Heading code (e.g. 7604, 7306).",
                    },
                    "description": {
                        "type": "string",
                        "description": "The description or title associated with this heading in the document.",
                    },
                    "details": {
                        "type": "string",
                        "description": "A comprehensive summary of the specific rules, exclusions, and "
                        "scope details mentioned in the text for this heading.",
                    },
                },
                "required": ["heading", "description", "details"],
            },
        },
    },
    "required": ["headings"],
}

ANALYSIS_SCHEMA = ResponseSchema("hts_analysis", _ANALYSIS_JSON, AnalysisResult)
PROVISION_SCHEMA = ResponseSchema("provision_lookup", _PROVISION_JSON, ProvisionResult)
HEADINGS_SCHEMA = ResponseSchema("headings_extraction", _HEADINGS_JSON, HeadingsEnvelope)


def _strip_fences(raw: str) -> str:
    raw = raw.strip()
    if raw.startswith("```"):
        raw = raw.strip("`").strip()
        if raw.lower().startswith("json"):
            raw = raw[4:].strip()
    return raw


def decode(schema: ResponseSchema, raw: str | None) -> BaseModel:
    """
    Parse-then-validate a backend body. Checks shape only (required fields,
    types, enum members); cross-field rules are the backend's responsibility.
    """
    text = _strip_fences(raw or "")
    if not text:
        raise BackendProtocolError(f"Empty response body for {schema.name}.")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise BackendProtocolError(
            f"Response for {schema.name} is not valid JSON: {e.msg}"
        ) from e
    try:
        return schema.model.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(
            ".".join(str(x) for x in err.get("loc", ())) or "<root>" for err in e.errors()
        )
        raise BackendProtocolError(
            f"Response for {schema.name} does not match its schema ({fields})."
        ) from e


def decode_as(schema: ResponseSchema, raw: str | None, model: Type[M]) -> M:
    obj = decode(schema, raw)
    if not isinstance(obj, model):
        raise TypeError(f"{schema.name} decodes to {type(obj).__name__}, not {model.__name__}")
    return obj
