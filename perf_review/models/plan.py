from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from perf_review.database import Base

class Plan(Base):
    __tablename__ = "plans"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), index=True, nullable=False)
    file_name = Column(String, nullable=False)
    pdf_path = Column(String, nullable=True)
    extracted_text = Column(Text, default="")
    elements = Column(JSON, default=list)  # List of PlanElement dicts, document order
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    employee = relationship("Employee", backref="plans")
