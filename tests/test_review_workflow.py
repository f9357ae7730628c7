from perf_review.core.config import settings
from perf_review.models.activity import Activity

REVIEW_OUTPUT = """## Critical Element: Communication
Fully successful.
- Published the onboarding guide

## Critical Element: Delivery
⚠️ NO ACTIVITIES DOCUMENTED FOR THIS ELEMENT
Suggested activities the employee may have done:
- Coordinated a release
- Tracked sprint commitments
"""

RATING_OUTPUT = """## Communication
**Summary:** Published the onboarding guide.
**Rating:** 4
**Score:** 160

## Delivery
**Summary:** Delivered the billing migration.
**Rating:** 4
**Score:** 240

**Total Score:** 400

## Summary Rating Narrative Documentation
A strong year across both elements.
"""

def _add_activities(db_session, employee, plan, months):
    for month in months:
        db_session.add(Activity(employee_id=employee.id, plan_id=plan.id, month=month, content=f"Work in {month}"))
    db_session.commit()

def test_generate_review(client, db_session, employee, plan, fake_ai):
    _add_activities(db_session, employee, plan, ["2024-12", "2025-01", "2025-02", "2025-04"])
    fake_ai.output = REVIEW_OUTPUT

    response = client.post("/api/reviews/generate", json={
        "employee_id": employee.id,
        "plan_id": plan.id,
        "period_start": "2025-01-01",
        "period_end": "2025-03-31",
        "guidance": "Keep it short.",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["output_markdown"] == REVIEW_OUTPUT
    assert data["prompt_meta"] == {"provider": "openai", "model": settings.ai.openai_model, "truncated": False}
    assert data["suggestions"] == {"Delivery": ["Coordinated a release", "Tracked sprint commitments"]}

    prompt = fake_ai.prompts[-1]
    assert "[2025-01] Work in 2025-01" in prompt
    assert "[2025-02] Work in 2025-02" in prompt
    assert "2024-12" not in prompt
    assert "2025-04" not in prompt
    assert "Keep it short." in prompt

    listed = client.get("/api/reviews", params={"plan_id": plan.id}).json()
    assert [r["id"] for r in listed] == [data["id"]]

def test_generate_review_for_element_subset(client, employee, plan, fake_ai):
    fake_ai.output = "## Critical Element: Delivery\nFine."
    delivery_id = plan.elements[1]["id"]
    response = client.post("/api/reviews/generate", json={
        "employee_id": employee.id,
        "plan_id": plan.id,
        "period_start": "2025-01-01",
        "period_end": "2025-03-31",
        "element_ids": [delivery_id],
    })
    assert response.status_code == 200
    prompt = fake_ai.prompts[-1]
    assert "### Delivery" in prompt
    assert "### Communication" not in prompt

def test_generate_review_rejects_bad_period(client, employee, plan, fake_ai):
    response = client.post("/api/reviews/generate", json={
        "employee_id": employee.id,
        "plan_id": plan.id,
        "period_start": "2025-03-31",
        "period_end": "2025-01-01",
    })
    assert response.status_code == 422

def test_delete_review(client, employee, plan, fake_ai):
    fake_ai.output = "Draft"
    review_id = client.post("/api/reviews/generate", json={
        "employee_id": employee.id, "plan_id": plan.id,
        "period_start": "2025-01-01", "period_end": "2025-01-31",
    }).json()["id"]
    assert client.delete(f"/api/reviews/{review_id}").json() == {"deleted": True}
    assert client.delete(f"/api/reviews/{review_id}").status_code == 404

def test_generate_rating(client, db_session, employee, plan, fake_ai):
    _add_activities(db_session, employee, plan, ["2024-09", "2024-10", "2025-09", "2025-10"])
    fake_ai.output = RATING_OUTPUT

    response = client.post("/api/ratings/generate", json={
        "employee_id": employee.id,
        "plan_id": plan.id,
        "fiscal_year": 2025,
        "target_rating": 4,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["fiscal_year_label"] == "FY2025 (Oct 2024 - Sep 2025)"
    assert data["total_score"] == 400
    assert data["overall_rating"] == 4
    assert data["target_rating"] == 4
    assert [(r["title"], r["rating"], r["score"]) for r in data["element_ratings"]] == [
        ("Communication", 4, 160),
        ("Delivery", 4, 240),
    ]
    assert data["narrative_summary"] == "A strong year across both elements."

    prompt = fake_ai.prompts[-1]
    assert "Target total score band: 380-469" in prompt
    assert "[2024-10] Work in 2024-10" in prompt
    assert "[2025-09] Work in 2025-09" in prompt
    assert "2024-09" not in prompt
    assert "2025-10" not in prompt

def test_generate_rating_tolerates_unstructured_output(client, employee, plan, fake_ai):
    fake_ai.output = "I cannot rate this employee."
    response = client.post("/api/ratings/generate", json={
        "employee_id": employee.id, "plan_id": plan.id, "fiscal_year": 2025, "target_rating": 3,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["element_ratings"] == []
    assert data["total_score"] == 0
    assert data["overall_rating"] == 1
    assert data["narrative_summary"] is None

def test_generate_rating_validates_target(client, employee, plan, fake_ai):
    response = client.post("/api/ratings/generate", json={
        "employee_id": employee.id, "plan_id": plan.id, "fiscal_year": 2025, "target_rating": 6,
    })
    assert response.status_code == 422
