import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import Project, Task, User, UserRole
from taskhub.schemas.user import UserOut, UserUpdate
from taskhub.services import analytics
from taskhub.utils.auth import get_current_user, require_roles

logger = logging.getLogger(__name__)

router = APIRouter()

REPORT_START = date(2024, 1, 1)


@router.get("/employees")
def employees(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    users = db.query(User).order_by(User.name).all()
    return analytics.employee_task_counts(users, db.query(Task).all())


@router.get("/insights")
def insights(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.hr_insights(db.query(User).all(), db.query(Task).all(), db.query(Project).all())


@router.get("/performance")
def performance(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.employee_performance(db.query(User).order_by(User.name).all(), db.query(Task).all())


@router.get("/reports/{report_type}")
def report(
    report_type: str,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if report_type == "productivity":
        start = start_date or REPORT_START
        end = end_date or date.today()
        owners = {u.emp_id: u for u in db.query(User).all()}
        rows = []
        for task in db.query(Task).order_by(Task.created_at, Task.id).all():
            created = task.created_at.date() if task.created_at else None
            if created is None or not (start <= created <= end):
                continue
            owner = owners.get(task.owner_id)
            rows.append({
                "id": task.id,
                "title": task.title,
                "status": task.status,
                "priority": task.priority,
                "due_date": task.due_date.isoformat() if task.due_date else None,
                "created_at": task.created_at.isoformat(),
                "owner_id": task.owner_id,
                "owner": {"name": owner.name, "department": owner.department} if owner else None,
            })
        return rows

    if report_type == "department":
        users = db.query(User).filter(User.department.isnot(None)).order_by(User.department, User.name).all()
        return [
            {
                "department": u.department,
                "role": u.role,
                "created_at": u.created_at.isoformat() if u.created_at else None,
            }
            for u in users
        ]

    raise HTTPException(status_code=400, detail="Invalid report type")


@router.put("/employees/{emp_id}", response_model=UserOut)
def update_employee(
    emp_id: str,
    payload: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles(UserRole.HR, UserRole.DIRECTOR)),
):
    user = db.query(User).filter(User.emp_id == emp_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Employee not found")

    updates = payload.model_dump(exclude_unset=True)
    if updates.get("email") and updates["email"] != user.email:
        if db.query(User).filter(User.email == updates["email"], User.id != user.id).first():
            raise HTTPException(status_code=400, detail="Email already registered")
    if updates.get("role"):
        updates["role"] = updates["role"].lower()

    for key, value in updates.items():
        if value is not None:
            setattr(user, key, value)
    db.commit()
    db.refresh(user)
    logger.info(f"Employee {emp_id} updated by {current_user.emp_id}: {sorted(updates)}")
    return user


@router.get("/departments")
def departments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.department_loads(db.query(User).all(), db.query(Task).all())


@router.get("/analytics/performance-rankings")
def performance_rankings(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.performance_rankings(db.query(User).all(), db.query(Task).all())


@router.get("/analytics/trends")
def trends(
    period: str = "monthly",
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if period not in ("monthly", "weekly"):
        raise HTTPException(status_code=400, detail="period must be monthly or weekly")
    return analytics.productivity_trends(db.query(Task).all(), period)
