import pytest
import os
import tempfile
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="perf_review_test_")
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["AI_PROVIDER"] = "openai"

from perf_review.database import Base, get_db
from perf_review.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PLAN_TEXT = """Performance Plan FY2025
Select Language
Critical Element
Communication
Objective
Communicate clearly with stakeholders.
Weight: 40
Results of Activities
Clear written documentation.
Criteria for Evaluation (Metrics)
Peer review score.
Final Element Rating
Critical Element
Delivery
Objective
Ship planned work on schedule.
Element Weight: 60
Results of Activities
Releases delivered.
Criteria for Evaluation
On-time delivery rate.
Final Element Rating"""

@pytest.fixture
def plan_text():
    return PLAN_TEXT

@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture(scope="function")
def db_session():
    """Get a clean database session for each test function with rollback safety."""
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()

@pytest.fixture(scope="function")
def employee(db_session):
    from perf_review.models.employee import Employee
    emp = Employee(display_name="Jordan Lee", email="jordan@example.com")
    db_session.add(emp)
    db_session.commit()
    return emp

@pytest.fixture(scope="function")
def plan(db_session, employee):
    """A plan segmented from PLAN_TEXT, without going through PDF extraction."""
    from perf_review.models.plan import Plan
    from perf_review.services.plan_segmenter import segment
    p = Plan(
        employee_id=employee.id,
        file_name="plan.pdf",
        extracted_text=PLAN_TEXT,
        elements=[e.model_dump() for e in segment(PLAN_TEXT)],
    )
    db_session.add(p)
    db_session.commit()
    return p

@pytest.fixture(scope="function")
def fake_ai(monkeypatch):
    """
    Replace the outbound model call. Set `fake_ai.output` before triggering a
    generation; sent prompts are recorded in `fake_ai.prompts`.
    """
    from perf_review.services.ai_orchestrator import AIOrchestrator

    class FakeAI:
        output = ""
        prompts = []

    fake = FakeAI()
    fake.prompts = []

    def _fake_call(api_key, model, system_prompt, prompt, timeout):
        fake.prompts.append(prompt)
        return fake.output

    monkeypatch.setattr(AIOrchestrator, "_call_openai", staticmethod(_fake_call))
    monkeypatch.setattr(AIOrchestrator, "_call_anthropic", staticmethod(_fake_call))
    return fake

@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
