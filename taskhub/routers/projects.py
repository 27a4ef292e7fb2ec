import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from taskhub.database import get_db, json_list_may_contain
from taskhub.models import Project, User
from taskhub.schemas.project import ProjectCreate, ProjectUpdate, ProjectOut
from taskhub.utils.auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def create_project(db: Session, payload: ProjectCreate, owner: User) -> Project:
    """Shared by the owner and manager project routes"""
    if not payload.title or not payload.title.strip():
        raise HTTPException(status_code=400, detail="Title is required")

    project = Project(
        title=payload.title,
        description=payload.description,
        owner_id=owner.emp_id,
        status=payload.status or "active",
        members=payload.members or [],
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info(f"Project {project.id} created by {owner.emp_id}")
    return project


def projects_for(db: Session, user: User) -> List[Project]:
    projects = (
        db.query(Project)
        .filter(or_(Project.owner_id == user.emp_id, json_list_may_contain(Project.members, user.emp_id)))
        .order_by(Project.created_at.desc(), Project.id.desc())
        .all()
    )
    return [p for p in projects if p.has_member(user.emp_id)]


def _get_owned_project(db: Session, project_id: int, user: User, verb: str) -> Project:
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if str(project.owner_id) != str(user.emp_id):
        raise HTTPException(status_code=403, detail=f"Not authorized to {verb} this project")
    return project


@router.get("", response_model=List[ProjectOut])
def list_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return projects_for(db, current_user)


@router.get("/names")
def project_names(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return {str(p.id): p.title for p in projects_for(db, current_user)}


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def add_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return create_project(db, payload, current_user)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = _get_owned_project(db, project_id, current_user, "update")

    for key, value in payload.model_dump(exclude_unset=True).items():
        if key == "title" and not (value or "").strip():
            continue
        if key == "status" and value is None:
            continue
        if key == "members" and value is None:
            value = []
        setattr(project, key, value)
    db.commit()
    db.refresh(project)
    return project


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project = _get_owned_project(db, project_id, current_user, "delete")
    db.delete(project)
    db.commit()
    logger.info(f"Project {project_id} deleted by {current_user.emp_id}")
    return {"message": "Project deleted successfully"}


@router.get("/{project_id}/members")
def project_members(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Everyone on the project (owner included) except the caller"""
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    if not project.has_member(current_user.emp_id):
        raise HTTPException(status_code=403, detail="Not authorized to view this project")

    member_ids = [str(m) for m in (project.members or [])]
    if project.owner_id and str(project.owner_id) not in member_ids:
        member_ids.append(str(project.owner_id))
    member_ids = [m for m in member_ids if m != str(current_user.emp_id)]
    if not member_ids:
        return {"members": []}

    users = db.query(User).filter(User.emp_id.in_(member_ids)).order_by(User.name).all()
    return {"members": [{"emp_id": u.emp_id, "name": u.name, "email": u.email} for u in users]}
