from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from taskhub.database import get_db
from taskhub.models import Project, User, UserRole
from taskhub.routers.projects import create_project
from taskhub.schemas.project import ProjectCreate, ProjectOut
from taskhub.utils.auth import require_roles

router = APIRouter()

require_manager = require_roles(UserRole.MANAGER)


@router.get("/all", response_model=List[ProjectOut])
def all_projects(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
):
    return db.query(Project).order_by(Project.created_at.desc(), Project.id.desc()).all()


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def add_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
):
    return create_project(db, payload, current_user)


@router.delete("/{project_id}")
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_manager),
):
    project = db.query(Project).filter(Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    db.delete(project)
    db.commit()
    return {"message": "Project deleted successfully"}
