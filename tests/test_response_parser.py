from perf_review.core import prompts
from perf_review.schemas.plan import PlanElement
from perf_review.services.prompt_builder import build_review_prompt
from perf_review.services.response_parser import (
    extract_suggestions,
    parse_rating_output,
    rating_for_total,
)

COMMUNICATION = PlanElement(title="Communication", description="Be clear.", weight=10)
DELIVERY = PlanElement(title="Delivery", description="Ship on time.", weight=20)

NO_ACTIVITY_OUTPUT = (
    "## Critical Element: Communication\n"
    "⚠️ NO ACTIVITIES DOCUMENTED FOR THIS ELEMENT\n"
    "Suggested activities the employee may have done:\n"
    "- Drafted a style guide\n"
    "- Ran a workshop"
)

RATING_OUTPUT = """## Communication
**Summary:** Wrote clear design docs and ran
weekly updates.
**Rating:** 4
**Score:** 40

## Delivery
**Summary:** Shipped most releases on time.
**Rating:** 3
**Score:** 60

**Total Score:** 100

## Summary Rating Narrative Documentation
Jordan communicated well and delivered steadily.

Overall a solid year.
"""

def test_suggestions_scenario():
    assert extract_suggestions(NO_ACTIVITY_OUTPUT, [COMMUNICATION]) == {
        "Communication": ["Drafted a style guide", "Ran a workshop"]
    }

def test_suggestions_round_trip_with_builder_contract():
    prompt = build_review_prompt("Jordan", "2025-01-01", "2025-03-31", [COMMUNICATION, DELIVERY], [])
    # The prompt itself carries no flagged sections to harvest
    assert extract_suggestions(prompt, [COMMUNICATION, DELIVERY]) == {}

    bullets = ["Mentored a new hire", "Documented the release process"]
    fixture = "\n".join([
        f"{prompts.REVIEW_ELEMENT_HEADER} {DELIVERY.title}",
        "Fully successful performance.",
        "- Shipped three releases",
        f"{prompts.REVIEW_ELEMENT_HEADER} {COMMUNICATION.title}",
        prompts.NO_ACTIVITIES_LINE,
        prompts.SUGGESTIONS_LEAD,
        *[f"{prompts.BULLET_PREFIX}{b}" for b in bullets],
    ])
    assert extract_suggestions(fixture, [COMMUNICATION, DELIVERY]) == {"Communication": bullets}

def test_suggestions_ignore_instruction_leak_and_stop_at_next_header():
    output = (
        "## critical element: COMMUNICATION\n"
        "**⚠️ NO ACTIVITIES DOCUMENTED FOR THIS ELEMENT**\n"
        "- Suggested activities the employee may have done:\n"
        "- Hosted office hours\n"
        "## Critical Element: Delivery\n"
        "Exceeded expectations.\n"
        "- Shipped the billing migration\n"
        "## Overall progress\n"
        "- Not a suggestion\n"
    )
    assert extract_suggestions(output, [COMMUNICATION, DELIVERY]) == {
        "Communication": ["Hosted office hours"]
    }

def test_suggestions_require_warning_marker():
    output = "## Critical Element: Communication\nNO ACTIVITIES DOCUMENTED\n- Something\n"
    assert extract_suggestions(output, [COMMUNICATION]) == {}

def test_suggestions_for_unknown_titles_are_dropped():
    output = NO_ACTIVITY_OUTPUT.replace("Communication", "Budgeting")
    assert extract_suggestions(output, [COMMUNICATION]) == {}

def test_rating_totals_and_fields():
    result = parse_rating_output(RATING_OUTPUT, [COMMUNICATION, DELIVERY])
    assert result.total_score == 4 * 10 + 3 * 20 == 100
    comm, deliv = result.element_ratings
    assert (comm.element_id, comm.rating, comm.score, comm.weight) == (COMMUNICATION.id, 4, 40, 10)
    assert comm.summary == "Wrote clear design docs and ran weekly updates."
    assert (deliv.rating, deliv.score) == (3, 60)
    assert result.narrative_summary == (
        "Jordan communicated well and delivered steadily.\n\nOverall a solid year."
    )

def test_rating_missing_section_is_omitted():
    output = RATING_OUTPUT.replace("## Delivery", "## Something Else")
    result = parse_rating_output(output, [COMMUNICATION, DELIVERY])
    assert [r.title for r in result.element_ratings] == ["Communication"]
    assert result.total_score == 40

def test_rating_unstructured_output_does_not_raise():
    result = parse_rating_output("The model refused to answer.", [COMMUNICATION, DELIVERY])
    assert result.element_ratings == []
    assert result.total_score == 0
    assert result.narrative_summary is None

def test_rating_for_total_uses_score_bands():
    assert rating_for_total(50) == 1
    assert rating_for_total(100) == 1
    assert rating_for_total(289) == 2
    assert rating_for_total(290) == 3
    assert rating_for_total(469) == 4
    assert rating_for_total(500) == 5

def test_suggestions_survive_sub_headers_inside_element():
    output = (
        "## Critical Element: Communication\n"
        "⚠️ NO ACTIVITIES DOCUMENTED FOR THIS ELEMENT\n"
        "#### Suggested activities\n"
        "- Drafted a style guide\n"
        "- Ran a workshop\n"
        "## Overall progress\n"
        "- Not a suggestion\n"
    )
    assert extract_suggestions(output, [COMMUNICATION]) == {
        "Communication": ["Drafted a style guide", "Ran a workshop"]
    }

def test_rating_sections_with_shared_title_are_used_once():
    first = PlanElement(title="Delivery", weight=10)
    second = PlanElement(title="Delivery", weight=20)
    output = (
        "## Delivery\n**Summary:** First.\n**Rating:** 3\n**Score:** 30\n\n"
        "## Delivery\n**Summary:** Second.\n**Rating:** 5\n**Score:** 100\n"
    )
    result = parse_rating_output(output, [first, second])
    assert [(r.element_id, r.score) for r in result.element_ratings] == [(first.id, 30), (second.id, 100)]
    assert result.total_score == 130

def test_rating_shared_title_with_one_section_counts_once():
    first = PlanElement(title="Delivery", weight=10)
    second = PlanElement(title="Delivery", weight=20)
    output = "## Delivery\n**Summary:** Only one.\n**Rating:** 3\n**Score:** 30\n"
    result = parse_rating_output(output, [first, second])
    assert [r.element_id for r in result.element_ratings] == [first.id]
    assert result.total_score == 30
