from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.sql import func
from perf_review.database import Base

class ReviewDraft(Base):
    __tablename__ = "review_drafts"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), index=True, nullable=False)
    plan_id = Column(Integer, ForeignKey("plans.id"), index=True, nullable=False)
    period_start = Column(String(10), nullable=False)  # YYYY-MM-DD
    period_end = Column(String(10), nullable=False)
    provider = Column(String, nullable=False)
    model = Column(String, nullable=False)
    truncated = Column(Boolean, default=False)
    output_markdown = Column(Text, default="")
    suggestions = Column(JSON, default=dict)  # element title -> suggested activities
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def prompt_meta(self):
        return {"provider": self.provider, "model": self.model, "truncated": bool(self.truncated)}
