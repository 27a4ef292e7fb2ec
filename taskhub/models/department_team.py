# taskhub/models/department_team.py
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func

from taskhub.database import Base


class DepartmentTeam(Base):
    __tablename__ = "department_teams"

    id = Column(Integer, primary_key=True, index=True)
    department = Column(String(100), nullable=False, index=True)
    team_name = Column(String(255), nullable=False)
    member_ids = Column(JSON, nullable=False, default=list)  # emp_ids
    manager_ids = Column(JSON, nullable=False, default=list)  # emp_ids
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def is_managed_by(self, emp_id: str) -> bool:
        return str(emp_id) in [str(m) for m in (self.manager_ids or [])]
