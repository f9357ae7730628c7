import os
import logging
from pydantic import BaseModel, Field
from typing import Optional
from dotenv import load_dotenv

load_dotenv()

class AISettings(BaseModel):
    provider: str = Field(default=os.getenv("AI_PROVIDER", "openai").lower())
    openai_api_key: Optional[str] = Field(default=os.getenv("OPENAI_API_KEY"))
    openai_model: str = Field(default=os.getenv("OPENAI_MODEL", "gpt-4.1-mini"))
    anthropic_api_key: Optional[str] = Field(default=os.getenv("ANTHROPIC_API_KEY"))
    anthropic_model: str = Field(default=os.getenv("ANTHROPIC_MODEL", "claude-3-5-sonnet-latest"))
    kill_switch: bool = Field(default=os.getenv("AI_KILL_SWITCH", "false").lower() == "true")
    temperature: float = 0.4
    max_tokens: int = int(os.getenv("AI_MAX_TOKENS", "4000"))

    # Prompt budget and call timeouts
    max_prompt_chars: int = int(os.getenv("MAX_PROMPT_CHARS", "12000"))
    review_timeout_seconds: float = float(os.getenv("REVIEW_TIMEOUT_SECONDS", "120"))
    rating_timeout_seconds: float = float(os.getenv("RATING_TIMEOUT_SECONDS", "300"))

class Config(BaseModel):
    app_name: str = "Performance Review Assistant"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"
    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # Storage
    data_dir: str = os.getenv("DATA_DIR", os.path.join(os.getcwd(), "data"))
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./data/perf_review.db")
    max_upload_bytes: int = 20 * 1024 * 1024  # 20MB

    # AI Components
    ai: AISettings = AISettings()

    @property
    def upload_dir(self) -> str:
        return os.path.join(self.data_dir, "uploads")

settings = Config()

_logger = logging.getLogger(__name__)
if settings.ai.provider not in ("openai", "anthropic"):
    _logger.warning(f"⚠ Unknown AI_PROVIDER '{settings.ai.provider}', falling back to openai.")
    settings.ai.provider = "openai"
