from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import Project, Task, User
from taskhub.services import analytics
from taskhub.utils.auth import get_current_user

router = APIRouter()


@router.get("/overview")
def overview(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Executive overview: company KPIs, project portfolio and task metrics"""
    return analytics.company_kpis(db.query(User).all(), db.query(Task).all(), db.query(Project).all())


@router.get("/kpis")
def kpis(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.company_kpis(db.query(User).all(), db.query(Task).all(), db.query(Project).all())


@router.get("/departments")
def departments(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    users = db.query(User).order_by(User.department, User.name).all()
    return {"departments": analytics.department_performance(users, db.query(Task).all(), db.query(Project).all())}


@router.get("/resources")
def resources(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    users = db.query(User).order_by(User.department, User.name).all()
    return analytics.resource_allocation(users, db.query(Task).all())


@router.get("/risks")
def risks(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.risk_indicators(db.query(User).all(), db.query(Task).all(), db.query(Project).all())


@router.get("/collaboration")
def collaboration(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return analytics.collaboration_metrics(db.query(User).all(), db.query(Project).all())
