from .user import RegisterRequest, LoginRequest, RefreshRequest, UserOut, UserSummary, UserUpdate, BulkUsersRequest
from .tokens import Token
from .task import TaskCreate, TaskUpdate, TaskOut, ManagerInfo, ProjectTaskOut, BulkProjectTasksRequest, TaskHistoryOut
from .subtask import SubTaskCreate, SubTaskUpdate, SubTaskOut
from .project import ProjectCreate, ProjectUpdate, ProjectOut
from .notification import NotificationCreate, NotificationOut, UnreadCount, DeadlineCheckRequest
from .report import PdfReportRequest
