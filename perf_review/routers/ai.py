from fastapi import APIRouter

from perf_review.core.config import settings
from perf_review.services.ai_orchestrator import AIOrchestrator

router = APIRouter(prefix="/ai", tags=["ai"])

@router.get("/providers")
def list_providers():
    """Providers with a configured API key and the models offered for each."""
    return {
        "default": AIOrchestrator.resolve_provider(settings.ai.provider),
        "providers": AIOrchestrator.list_providers(),
    }
