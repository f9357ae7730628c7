from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
import logging

from perf_review.database import get_db
from perf_review.models.employee import Employee
from perf_review.schemas.employee import EmployeeCreate, EmployeeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/employees", tags=["employees"])

@router.get("", response_model=List[EmployeeResponse])
def list_employees(db: Session = Depends(get_db)):
    return db.query(Employee).order_by(Employee.display_name).all()

@router.post("", response_model=EmployeeResponse)
def create_employee(payload: EmployeeCreate, db: Session = Depends(get_db)):
    employee = Employee(display_name=payload.display_name.strip(), email=payload.email)
    db.add(employee)
    db.commit()
    db.refresh(employee)
    logger.info(f"Created employee {employee.id}")
    return employee
