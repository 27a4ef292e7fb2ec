from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskhub.database import get_db, json_list_may_contain
from taskhub.models import DepartmentTeam, Task, User
from taskhub.services import analytics
from taskhub.utils.auth import get_current_user

router = APIRouter()


def _team_dict(team: DepartmentTeam) -> dict:
    return {
        "id": team.id,
        "department": team.department,
        "team_name": team.team_name,
        "member_ids": team.member_ids or [],
        "manager_ids": team.manager_ids or [],
        "created_at": team.created_at.isoformat() if team.created_at else None,
    }


def _member_dict(user: User) -> dict:
    return {
        "emp_id": user.emp_id,
        "name": user.name,
        "email": user.email,
        "department": user.department,
        "role": user.role,
    }


def managed_teams(db: Session, emp_id: str) -> List[DepartmentTeam]:
    teams = (
        db.query(DepartmentTeam)
        .filter(json_list_may_contain(DepartmentTeam.manager_ids, emp_id))
        .order_by(DepartmentTeam.id)
        .all()
    )
    return [t for t in teams if t.is_managed_by(emp_id)]


def _unique_member_ids(teams: List[DepartmentTeam]) -> List[str]:
    return list(dict.fromkeys(str(m) for team in teams for m in (team.member_ids or [])))


@router.get("/my-team")
def my_team(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    teams = managed_teams(db, current_user.emp_id)
    if not teams:
        return {"teams": [], "message": "No teams found for this manager"}

    member_ids = _unique_member_ids(teams)
    members = {}
    if member_ids:
        members = {u.emp_id: u for u in db.query(User).filter(User.emp_id.in_(member_ids)).all()}

    result = []
    for team in teams:
        entry = _team_dict(team)
        entry["members"] = [
            _member_dict(members[str(m)]) for m in (team.member_ids or []) if str(m) in members
        ]
        result.append(entry)
    return {"teams": result}


@router.get("/workload")
def workload(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    teams = managed_teams(db, current_user.emp_id)
    member_ids = _unique_member_ids(teams)
    if not member_ids:
        return {
            "workload": {},
            "summary": {"total_members": 0, "total_tasks": 0, "due_soon": 0, "overdue": 0},
            "teams": [_team_dict(t) for t in teams],
        }

    members = db.query(User).filter(User.emp_id.in_(member_ids)).order_by(User.name).all()
    candidates = (
        db.query(Task)
        .filter(or_(
            Task.owner_id.in_(member_ids),
            *[json_list_may_contain(Task.collaborators, m) for m in member_ids],
        ))
        .all()
    )
    tasks = [t for t in candidates if any(t.involves(m) for m in member_ids)]

    result = analytics.team_workload(members, tasks)
    result["teams"] = [_team_dict(t) for t in teams]
    return result
