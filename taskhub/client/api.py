# taskhub/client/api.py
"""
HTTP client for the TaskHub API.

Failures are recorded in ``last_error``. Read helpers used by polling return a
fallback value instead of raising, so a flaky network never kills a poller.
"""

import logging
import time
from typing import Any, Callable, Dict, List, Optional

import requests

from taskhub.config import settings

logger = logging.getLogger(__name__)


class TaskHubError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TaskHubClient:
    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        session=None,
        timeout: Optional[float] = None,
        deadline_cooldown_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        # session may be any requests-compatible client, e.g. FastAPI's TestClient
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout or settings.CLIENT_REQUEST_TIMEOUT
        self.deadline_cooldown = (deadline_cooldown_seconds if deadline_cooldown_seconds is not None
                                  else settings.CLIENT_DEADLINE_COOLDOWN_SECONDS)
        self.clock = clock
        self.last_error: Optional[str] = None
        self.last_deadline_result: Optional[Dict[str, Any]] = None
        self._last_deadline_check: Optional[float] = None

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, headers=self._headers(), timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            self.last_error = str(e)
            raise TaskHubError(self.last_error) from e

        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            self.last_error = f"HTTP {response.status_code}: {message}"
            raise TaskHubError(self.last_error, response.status_code)

        self.last_error = None
        return response.json()

    # Auth

    def login(self, email: str, password: str) -> Dict[str, Any]:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["access_token"]
        return data["user"]

    # Notifications

    def get_notifications(self) -> List[Dict[str, Any]]:
        try:
            return self._request("GET", "/notification")
        except TaskHubError as e:
            logger.error(f"Failed to fetch notifications: {e}")
            return []

    def get_unread_count(self) -> Optional[int]:
        """Unread count, or None when the request failed"""
        try:
            return self._request("GET", "/notification/unread-count")["unread_count"]
        except TaskHubError as e:
            logger.error(f"Failed to fetch unread count: {e}")
            return None

    def mark_as_read(self, notification_id: int) -> Optional[Dict[str, Any]]:
        try:
            return self._request("PATCH", f"/notification/{notification_id}/read")
        except TaskHubError as e:
            logger.error(f"Failed to mark notification {notification_id} as read: {e}")
            return None

    def mark_all_as_read(self) -> Optional[Dict[str, Any]]:
        try:
            return self._request("PATCH", "/notification/mark-all-read")
        except TaskHubError as e:
            logger.error(f"Failed to mark all notifications as read: {e}")
            return None

    # Deadline checks

    def trigger_deadline_check(self, force: bool = False) -> Dict[str, Any]:
        """
        Ask the server to run its deadline checks. Calls within the client
        cooldown are skipped locally unless forced. Errors are kept in
        last_error and re-raised.
        """
        now = self.clock()
        if (not force and self._last_deadline_check is not None
                and now - self._last_deadline_check < self.deadline_cooldown):
            logger.info("Deadline check skipped (cooldown)")
            return {"skipped": True, "reason": "cooldown"}

        try:
            result = self._request("POST", "/notification/check-deadlines", json={"force": force})
        except TaskHubError as e:
            self.last_deadline_result = {"error": str(e)}
            raise
        self.last_deadline_result = result
        self._last_deadline_check = now
        return result

    def get_deadline_status(self) -> Dict[str, Any]:
        return self._request("GET", "/notification/deadline-status")["data"]
