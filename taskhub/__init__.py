"""TaskHub: multi-role task, project and notification API."""

__version__ = "1.0.0"
