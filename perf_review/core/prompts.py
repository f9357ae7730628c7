"""
Centralized AI Prompt Repository
- System prompts for the review and rating domains
- Output-format markers shared by the prompt builder and the response parser,
  so the text we ask the model to produce and the text we scan for never drift
"""

from typing import Dict, Tuple

# --- SYSTEM PROMPTS ---
REVIEW_SYSTEM = (
    "You help draft performance plan progress reviews. "
    "Output concise, professional markdown."
)

RATING_SYSTEM = (
    "You help supervisors draft end-of-year performance ratings against a performance plan. "
    "Follow the requested output format exactly and output professional markdown."
)

# --- REVIEW OUTPUT CONTRACT ---
REVIEW_ELEMENT_HEADER = "## Critical Element:"
WARNING_GLYPH = "⚠️"
NO_ACTIVITIES_MARKER = "NO ACTIVITIES DOCUMENTED"
NO_ACTIVITIES_LINE = f"{WARNING_GLYPH} {NO_ACTIVITIES_MARKER} FOR THIS ELEMENT"
SUGGESTIONS_LEAD = "Suggested activities the employee may have done:"
# Bullets containing this phrase are instruction text, not suggestions
SUGGESTIONS_GUARD_PHRASE = "suggested activities"
BULLET_PREFIX = "- "

# --- RATING OUTPUT CONTRACT ---
RATING_ELEMENT_HEADER = "##"
SUMMARY_LABEL = "**Summary:**"
RATING_LABEL = "**Rating:**"
SCORE_LABEL = "**Score:**"
TOTAL_SCORE_LABEL = "**Total Score:**"
NARRATIVE_TITLE = "Summary Rating Narrative Documentation"
NARRATIVE_HEADER = f"## {NARRATIVE_TITLE}"

DEFAULT_ELEMENT_WEIGHT = 10
MIN_RATING = 1
MAX_RATING = 5

# Target rating -> inclusive total-score band
SCORE_BANDS: Dict[int, Tuple[int, int]] = {
    1: (100, 199),
    2: (200, 289),
    3: (290, 379),
    4: (380, 469),
    5: (470, 500),
}

# --- TRUNCATION ---
TRUNCATION_MARKER = "[TRUNCATED]"

# --- SEGMENTATION FALLBACK ---
UNPARSED_PLAN_TITLE = "Plan (unparsed)"
UNPARSED_PLAN_EXCERPT_CHARS = 4000
