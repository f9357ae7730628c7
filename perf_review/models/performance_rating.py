from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, JSON
from sqlalchemy.sql import func
from perf_review.database import Base

class PerformanceRating(Base):
    __tablename__ = "performance_ratings"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), index=True, nullable=False)
    plan_id = Column(Integer, ForeignKey("plans.id"), index=True, nullable=False)
    fiscal_year = Column(Integer, nullable=False)  # year the Oct-Sep period ends
    fiscal_year_label = Column(String, nullable=False)
    target_rating = Column(Integer, nullable=False)  # 1-5
    overall_rating = Column(Integer, nullable=False)  # 1-5, derived from total_score
    element_ratings = Column(JSON, default=list)
    total_score = Column(Integer, default=0)
    narrative_summary = Column(Text, nullable=True)
    output_markdown = Column(Text, default="")
    provider = Column(String, nullable=False)
    model = Column(String, nullable=False)
    truncated = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def prompt_meta(self):
        return {"provider": self.provider, "model": self.model, "truncated": bool(self.truncated)}
