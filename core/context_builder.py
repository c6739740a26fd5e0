from typing import Dict, List, Optional, Sequence
from config.settings import settings
from core.entities import InlineSegment, Segment, TextSegment
from model.hts import ContextKind, ManualEntry, ProvisionResult, ReferenceContext
from util.constants import NO_REFERENCE_LOOKUP_MESSAGE
from util.types import TaskKind
import logging

logger = logging.getLogger(__name__)

MANUAL_RULES_HEADER = (
    "MANUAL OVERRIDE / SUPPLEMENTARY RULES:\n"
    "The following are specific user-defined rules that MUST be checked. They take precedence "
    "over the reference document: if the HTS code matches any of these, it is a guaranteed match.\n\n"
)
DOCUMENT_HEADER = "REFERENCE DOCUMENT CONTENT:\n\n"
NO_DOCUMENT_WITH_RULES = (
    "No external reference document provided. Please rely strictly on the Manual Override "
    "Rules provided above."
)
NO_DATA_SOURCE = (
    "No data source is available: there is no reference document and no Manual Override Rules. "
    "Do not assume any derivative category applies."
)

# Caption that follows an inline document, per task.
_FILE_CAPTIONS: Dict[str, str] = {
    "classify": "The above is the reference document containing Derivative HTS details for Aluminum and Steel.",
    "lookup": "The above is the reference document containing Derivative HTS details.",
    "headings": "Reference document.",
}


def _entries_text(entries: Sequence[ManualEntry]) -> str:
    lines = [
        f"- Code/Range: {e.code}\n"
        f"  Category: {e.category}\n"
        f"  Metal: {e.metalType.value}\n"
        f"  Rule: {e.description}"
        for e in entries
    ]
    return MANUAL_RULES_HEADER + "\n\n".join(lines) + "\n\n"


def _document_segments(context: ReferenceContext, task: TaskKind) -> List[Segment]:
    if context.kind == ContextKind.file and context.mimeType:
        return [
            InlineSegment(mime_type=context.mimeType, data=context.content, name=context.name),
            TextSegment(_FILE_CAPTIONS[task]),
        ]
    return [TextSegment(f"{DOCUMENT_HEADER}{context.content}\n\n")]


def _task_segment(task: TaskKind, query: str) -> TextSegment:
    if task == "classify":
        return TextSegment(settings.CLASSIFY_TASK_PROMPT.format(hts_code=query))
    if task == "lookup":
        return TextSegment(settings.LOOKUP_TASK_PROMPT.format(provision_code=query))
    return TextSegment(settings.HEADINGS_TASK_PROMPT)


def build_segments(
    context: Optional[ReferenceContext],
    manual_entries: Sequence[ManualEntry],
    task: TaskKind,
    query: str = "",
) -> List[Segment]:
    """
    Order the evidence for one backend call:
      1) manual rules (classify only) - authoritative, so they go first
      2) the reference document, or a note that none is loaded
      3) exactly one task instruction segment carrying `query`
    Lookup without a document is answered by `lookup_short_circuit` instead.
    """
    if task not in _FILE_CAPTIONS:
        raise ValueError(f"unknown task kind: {task!r}")
    if task == "headings" and context is None:
        raise ValueError("heading extraction requires a reference context")

    segments: List[Segment] = []

    if task == "classify" and manual_entries:
        segments.append(TextSegment(_entries_text(manual_entries)))

    if context is not None:
        segments.extend(_document_segments(context, task))
    elif task == "classify":
        segments.append(TextSegment(NO_DOCUMENT_WITH_RULES if manual_entries else NO_DATA_SOURCE))

    segments.append(_task_segment(task, query))
    logger.debug(
        "context.segments task=%s count=%d entries=%d doc=%s",
        task,
        len(segments),
        len(manual_entries) if task == "classify" else 0,
        context.kind.value if context else "none",
    )
    return segments


def lookup_short_circuit(
    context: Optional[ReferenceContext], provision_code: str
) -> Optional[ProvisionResult]:
    """
    Provision lookups have no manual-rule fallback: without a document the
    answer is known to be "not found" and no backend call is made.
    """
    if context is not None:
        return None
    return ProvisionResult(
        found=False,
        code=provision_code,
        metalType="Unknown",
        description=NO_REFERENCE_LOOKUP_MESSAGE,
    )
