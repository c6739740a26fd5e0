import re
from typing import Dict, Optional
from model.hts import MetalType
from util.constants import DEFAULT_SEARCH_ERROR, HTS_CODE_PATTERN

_HTS_CODE_RE = re.compile(HTS_CODE_PATTERN)

# Prefixes that upstream SDKs and our own error types put in front of messages.
_NOISY_PREFIXES = (
    re.compile(r"^GoogleGenAIError:\s*", re.IGNORECASE),
    re.compile(r"^Backend(?:Transport|Protocol)Error:\s*", re.IGNORECASE),
    re.compile(r"^Error:\s*", re.IGNORECASE),
)


def clip_words(text: str, max_words: int = 100) -> str:
    """
    - Trim 'text' to at most `max_words` tokens separated by whitespace.
    - Adds an ellipsis when trimming occurs.
    """
    words = text.split()
    if len(words) <= max_words:
        return text
    return " ".join(words[:max_words]) + " …"


def is_valid_hts_code(code: Optional[str]) -> bool:
    """`7604.10` and `7604.10-7606.90` are valid; blanks and letters are not."""
    if code is None:
        return False
    code = code.strip()
    return bool(code) and _HTS_CODE_RE.match(code) is not None


def validate_entry_fields(
    code: Optional[str],
    category: Optional[str],
    description: Optional[str],
    metal_type: Optional[MetalType] = MetalType.aluminum,
) -> Dict[str, str]:
    """Return {field: message} for every manual-entry field that fails; {} when valid."""
    errors: Dict[str, str] = {}
    if not (code or "").strip():
        errors["code"] = "HTS Code is required"
    elif not is_valid_hts_code(code):
        errors["code"] = "Invalid format (digits/dots only, e.g. 7604.10)"
    if not (category or "").strip():
        errors["category"] = "Category name is required"
    if not (description or "").strip():
        errors["description"] = "Rule detail is required"
    # Unknown is reserved for backend answers; authored rules name a metal.
    if metal_type not in (MetalType.aluminum, MetalType.steel, MetalType.both):
        errors["metalType"] = "Metal type must be Aluminum, Steel or Both"
    return errors


def clean_error_message(error: BaseException | str | None) -> str:
    """User-facing text for a failed search, with known noisy prefixes stripped."""
    if isinstance(error, str):
        message = error
    elif isinstance(error, BaseException):
        message = getattr(error, "message", None) or str(error)
    else:
        return DEFAULT_SEARCH_ERROR

    for prefix in _NOISY_PREFIXES:
        message = prefix.sub("", message)
    message = message.strip()
    return message or DEFAULT_SEARCH_ERROR
