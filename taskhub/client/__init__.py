from .api import TaskHubClient, TaskHubError
from .store import NotificationStore
from .poller import NotificationPoller
