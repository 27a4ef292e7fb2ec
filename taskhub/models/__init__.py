from .user import User, UserRole
from .project import Project, ProjectStatus
from .task import Task, TaskStatus, RecurrencePattern
from .subtask import SubTask
from .task_history import TaskEditHistory
from .notification import Notification, NotificationType
from .department_team import DepartmentTeam
