from types import SimpleNamespace

import pytest

from perf_review.core import prompts
from perf_review.schemas.plan import PlanElement
from perf_review.schemas.rating import RatingElementInput
from perf_review.services.prompt_builder import build_final_rating_prompt, build_review_prompt

ELEMENTS = [
    PlanElement(title="Communication", description="Be clear.", results_of_activities="Clear docs.",
                metrics="Peer review score.", weight=40),
    PlanElement(title="Delivery", description="Ship on time."),
]

def _activity(month, content):
    return SimpleNamespace(month=month, content=content)

def test_review_prompt_renders_elements_and_contract():
    prompt = build_review_prompt("Jordan Lee", "2025-01-01", "2025-03-31", ELEMENTS, [])
    assert "Employee: Jordan Lee" in prompt
    assert "Review period: 2025-01-01 to 2025-03-31" in prompt
    assert "### Communication" in prompt
    assert "Expected results of activities: Clear docs." in prompt
    assert "Criteria for evaluation (metrics): Peer review score." in prompt
    assert "Element weight: 40" in prompt
    assert prompts.REVIEW_ELEMENT_HEADER in prompt
    assert prompts.NO_ACTIVITIES_LINE in prompt
    assert prompts.SUGGESTIONS_LEAD in prompt
    assert "- (none provided)" in prompt

def test_review_prompt_sorts_activities_without_mutating_input():
    activities = [_activity("2025-03", "March work"), _activity("2025-01", "January work")]
    prompt = build_review_prompt("Jordan", "2025-01-01", "2025-03-31", ELEMENTS, activities)
    assert prompt.index("[2025-01] January work") < prompt.index("[2025-03] March work")
    assert [a.month for a in activities] == ["2025-03", "2025-01"]

def test_review_prompt_strips_carriage_returns_only():
    activities = [_activity("2025-01", "Line one\r\nLine <b>two</b>")]
    prompt = build_review_prompt("Jordan", "2025-01-01", "2025-01-31", ELEMENTS, activities, guidance="Be brief\r")
    assert "\r" not in prompt
    assert "Line <b>two</b>" in prompt
    assert "Additional guidance:\nBe brief" in prompt

def test_review_prompt_is_deterministic():
    activities = [_activity("2025-02", "Work")]
    first = build_review_prompt("Jordan", "2025-01-01", "2025-03-31", ELEMENTS, activities)
    second = build_review_prompt("Jordan", "2025-01-01", "2025-03-31", ELEMENTS, activities)
    assert first == second

def _rating_elements():
    return [
        RatingElementInput(id="el_1", title="Communication", weight=40, description="Be clear.",
                           combined_activities="[2024-11] Wrote docs"),
        RatingElementInput(id="el_2", title="Delivery", description="Ship."),
    ]

@pytest.mark.parametrize("target,band", [
    (1, "100-199"),
    (2, "200-289"),
    (3, "290-379"),
    (4, "380-469"),
    (5, "470-500"),
])
def test_rating_prompt_embeds_score_band(target, band):
    prompt = build_final_rating_prompt("Jordan", "FY2025 (Oct 2024 - Sep 2025)", _rating_elements(), target)
    assert f"Target total score band: {band}" in prompt

def test_rating_prompt_contract_and_default_weight():
    prompt = build_final_rating_prompt("Jordan", "FY2025 (Oct 2024 - Sep 2025)", _rating_elements(), 3)
    assert "## Communication" in prompt
    assert "## Delivery" in prompt
    assert "- Weight: 10 (maximum score 50)" in prompt
    assert f"{prompts.SCORE_LABEL} <rating x 40>" in prompt
    assert f"{prompts.SCORE_LABEL} <rating x 10>" in prompt
    assert prompts.TOTAL_SCORE_LABEL in prompt
    assert prompts.NARRATIVE_HEADER in prompt
    assert "[2024-11] Wrote docs" in prompt

@pytest.mark.parametrize("target", [0, 6])
def test_rating_prompt_rejects_out_of_range_target(target):
    with pytest.raises(ValueError):
        build_final_rating_prompt("Jordan", "FY2025", _rating_elements(), target)
