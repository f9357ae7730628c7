"""
Plan text segmentation.

Turns the normalized text of a performance-plan PDF into PlanElement records.
Plans repeat a fixed block per critical element:

    Critical Element
    <name>
    Objective
    <objectives text>
    Results of Activities
    <expected results>
    Criteria for Evaluation
    <success criteria>
    Final Element Rating

The scan is a single pass over trimmed lines driven by a small state machine:
marker lines move between states, every other line is routed to the field the
current state collects. Malformed blocks degrade to empty fields instead of
failing, and a block whose name never shows up is dropped.
"""
import enum
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional

from perf_review.schemas.plan import PlanElement

logger = logging.getLogger(__name__)


class Marker(str, enum.Enum):
    CRITICAL_ELEMENT = "critical_element"
    OBJECTIVE = "objective"
    RESULTS = "results_of_activities"
    CRITERIA = "criteria_for_evaluation"
    WEIGHT = "element_weight"
    FINAL_RATING = "final_element_rating"


class SegmentState(str, enum.Enum):
    SEEKING = "seeking"            # outside any element
    NAME = "name"                  # opener seen, waiting for the element name
    HEADER = "header"              # name taken, waiting for Objective
    OBJECTIVES = "objectives"
    RESULTS = "results"
    CRITERIA = "criteria"
    SKIPPING = "skipping"          # nameless block, wait for the next opener


_MARKER_PATTERNS = [
    (Marker.CRITICAL_ELEMENT, re.compile(r"^critical\s+element(?:\s*#?\s*\d+)?\b", re.IGNORECASE)),
    (Marker.FINAL_RATING, re.compile(r"^final\s+element\s+rating\b", re.IGNORECASE)),
    (Marker.OBJECTIVE, re.compile(r"^objectives?\b", re.IGNORECASE)),
    (Marker.RESULTS, re.compile(r"^results\s+of\s+activities\b", re.IGNORECASE)),
    (Marker.CRITERIA, re.compile(r"^criteria\s+for\s+evaluation\b", re.IGNORECASE)),
]

_WEIGHT_INLINE = re.compile(r"^(?:element\s+)?weight\s*[:\-]?\s*(\d+)\s*%?", re.IGNORECASE)
_WEIGHT_ONLY = re.compile(r"^(?:element\s+)?weight\s*:?\s*$", re.IGNORECASE)
_BARE_NUMBER = re.compile(r"^(\d+)\s*%?$")
_INLINE_REMAINDER = re.compile(r"^\s*[:\-–]\s*(.*)$")
_BOILERPLATE = re.compile(r"select\s+language", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

# States in which a weight line is read as the element weight
_WEIGHT_STATES = {SegmentState.NAME, SegmentState.HEADER, SegmentState.OBJECTIVES}
_BODY_STATES = {
    SegmentState.HEADER,
    SegmentState.OBJECTIVES,
    SegmentState.RESULTS,
    SegmentState.CRITERIA,
}
_SECTION_STATES = {
    Marker.OBJECTIVE: SegmentState.OBJECTIVES,
    Marker.RESULTS: SegmentState.RESULTS,
    Marker.CRITERIA: SegmentState.CRITERIA,
}


def is_boilerplate(line: str) -> bool:
    return bool(_BOILERPLATE.search(line))


def classify_line(line: str) -> Optional[Marker]:
    """Return the marker a line opens with, or None for ordinary text."""
    for marker, pattern in _MARKER_PATTERNS:
        if pattern.match(line):
            return marker
    if _WEIGHT_INLINE.match(line) or _WEIGHT_ONLY.match(line):
        return Marker.WEIGHT
    return None


def next_state(state: SegmentState, marker: Optional[Marker]) -> SegmentState:
    """
    Transition function of the segmenter.

    `marker` is None for an ordinary text line; for NAME that means the
    name was found.
    """
    if marker is Marker.CRITICAL_ELEMENT:
        return SegmentState.NAME

    if state in (SegmentState.SEEKING, SegmentState.SKIPPING):
        return state

    if state is SegmentState.NAME:
        if marker is None:
            return SegmentState.HEADER
        if marker is Marker.WEIGHT:
            return SegmentState.NAME
        if marker is Marker.FINAL_RATING:
            return SegmentState.SEEKING
        return SegmentState.SKIPPING

    # Body states
    if marker is Marker.FINAL_RATING:
        return SegmentState.SEEKING
    if marker in _SECTION_STATES:
        return _SECTION_STATES[marker]
    return state


def _inline_text(line: str, marker: Marker) -> str:
    """Text following `Marker: ...` on the marker line itself."""
    pattern = dict(_MARKER_PATTERNS)[marker]
    match = pattern.match(line)
    remainder = _INLINE_REMAINDER.match(line[match.end():])
    return remainder.group(1).strip() if remainder else ""


def _is_name_candidate(line: str) -> bool:
    return line.strip().lower() != "element"


def _clean(parts: List[str]) -> str:
    return _WHITESPACE.sub(" ", " ".join(parts)).strip()


@dataclass
class _ElementDraft:
    title: str = ""
    weight: Optional[int] = None
    awaiting_weight: bool = False
    objectives: List[str] = field(default_factory=list)
    results: List[str] = field(default_factory=list)
    criteria: List[str] = field(default_factory=list)

    def collect(self, state: SegmentState, text: str) -> None:
        if not text:
            return
        if state is SegmentState.OBJECTIVES:
            self.objectives.append(text)
        elif state is SegmentState.RESULTS:
            self.results.append(text)
        elif state is SegmentState.CRITERIA:
            self.criteria.append(text)

    def to_element(self) -> PlanElement:
        return PlanElement(
            title=_clean([self.title]),
            description=_clean(self.objectives),
            weight=self.weight,
            results_of_activities=_clean(self.results) or None,
            metrics=_clean(self.criteria) or None,
        )


class PlanSegmenter:
    """Single-use scanner; call `feed` per line then `finish`."""

    def __init__(self):
        self.state = SegmentState.SEEKING
        self.draft: Optional[_ElementDraft] = None
        self.elements: List[PlanElement] = []

    def feed(self, line: str) -> None:
        if not line or is_boilerplate(line):
            return

        draft = self.draft
        if draft is not None and draft.awaiting_weight:
            draft.awaiting_weight = False
            bare = _BARE_NUMBER.match(line)
            if bare and self.state in _WEIGHT_STATES:
                if draft.weight is None:
                    draft.weight = int(bare.group(1))
                return

        marker = classify_line(line)
        if marker is Marker.WEIGHT and self.state not in _WEIGHT_STATES:
            marker = None

        if marker is Marker.WEIGHT:
            self._read_weight(line)
            return

        if self.state is SegmentState.NAME and marker is None and not _is_name_candidate(line):
            return

        previous = self.state
        self.state = next_state(previous, marker)
        self._on_transition(previous, marker, line)

    def finish(self) -> List[PlanElement]:
        if self.state in _BODY_STATES:
            self._emit()
        elif self.state is SegmentState.NAME:
            logger.debug("Dropping trailing critical element without a name")
        self.draft = None
        self.state = SegmentState.SEEKING
        return self.elements

    def _on_transition(self, previous: SegmentState, marker: Optional[Marker], line: str) -> None:
        if marker is Marker.CRITICAL_ELEMENT:
            if previous in _BODY_STATES:
                self._emit()
            elif previous is SegmentState.NAME:
                logger.debug("Dropping critical element without a name")
            self.draft = _ElementDraft()
            inline_name = _inline_text(line, marker)
            if inline_name and _is_name_candidate(inline_name) and classify_line(inline_name) is None:
                self.draft.title = inline_name
                self.state = SegmentState.HEADER
            return

        if previous is SegmentState.NAME:
            if marker is None:
                self.draft.title = line
            else:
                logger.debug(f"Dropping critical element: reached '{line}' before a name")
                self.draft = None
            return

        if previous in _BODY_STATES:
            if marker is Marker.FINAL_RATING:
                self._emit()
            elif marker in _SECTION_STATES:
                self.draft.collect(self.state, _inline_text(line, marker))
            else:
                self.draft.collect(self.state, line)

    def _read_weight(self, line: str) -> None:
        draft = self.draft
        inline = _WEIGHT_INLINE.match(line)
        if inline:
            if draft.weight is None:
                draft.weight = int(inline.group(1))
        else:
            draft.awaiting_weight = True

    def _emit(self) -> None:
        self.elements.append(self.draft.to_element())
        self.draft = None


def segment(text: str) -> List[PlanElement]:
    """
    Segment normalized plan text into critical elements.

    Returns an empty list when no element block is found; choosing a fallback
    for that case is up to the caller.
    """
    if not isinstance(text, str):
        raise TypeError(f"segment() expects str, got {type(text).__name__}")

    segmenter = PlanSegmenter()
    for raw_line in text.split("\n"):
        segmenter.feed(raw_line.strip())
    elements = segmenter.finish()
    logger.info(f"Segmented plan text into {len(elements)} critical element(s)")
    return elements
