import threading
from datetime import date, timedelta

import pytest

from tests.conftest import PASSWORD, auth_headers
from taskhub.client import NotificationPoller, NotificationStore, TaskHubClient, TaskHubError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class FakeClient:
    def __init__(self, counts):
        self.counts = list(counts)
        self.marked = []

    def get_unread_count(self):
        return self.counts.pop(0)

    def mark_as_read(self, notification_id):
        self.marked.append(notification_id)
        return {"id": notification_id, "read": True}

    def mark_all_as_read(self):
        return None


@pytest.fixture
def api(client, staff):
    return TaskHubClient(session=client, clock=FakeClock(), deadline_cooldown_seconds=120)


def test_store_notifies_only_on_change():
    store = NotificationStore()
    seen = []
    unsubscribe = store.subscribe(seen.append)

    assert store.set_unread_count(3) is True
    assert store.set_unread_count(3) is False
    store.decrement()
    store.set_unread_count(-5)
    assert seen == [3, 2, 0]

    unsubscribe()
    store.set_unread_count(7)
    assert seen == [3, 2, 0]
    assert store.unread_count == 7


def test_store_concurrent_decrements_are_not_lost():
    store = NotificationStore(unread_count=200)

    def worker():
        for _ in range(20):
            store.decrement()

    threads = [threading.Thread(target=worker) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert store.unread_count == 0


def test_store_survives_failing_listener():
    store = NotificationStore()
    seen = []

    def broken(count):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(seen.append)
    store.set_unread_count(1)
    assert seen == [1]


def test_poller_refresh_keeps_count_on_failure():
    store = NotificationStore()
    poller = NotificationPoller(FakeClient([4, None]), store, interval_seconds=60)

    assert poller.refresh() == 4
    assert poller.refresh() is None
    assert store.unread_count == 4


def test_poller_mark_helpers():
    store = NotificationStore(unread_count=2)
    fake = FakeClient([])
    poller = NotificationPoller(fake, store)

    assert poller.mark_as_read(11) is True
    assert fake.marked == [11]
    assert store.unread_count == 1
    assert poller.mark_all_as_read() is False
    assert store.unread_count == 1


def test_poller_start_stop():
    poller = NotificationPoller(FakeClient([0] * 5), NotificationStore(), interval_seconds=3600)
    poller.start()
    try:
        assert poller.is_running
        assert poller.scheduler.get_job("refresh_unread_count") is not None
    finally:
        poller.stop()
    assert not poller.is_running


def test_client_login_and_notifications(api, client, staff, colleague):
    user = api.login(staff.email, PASSWORD)
    assert user["emp_id"] == "E001"
    assert api.get_unread_count() == 0

    client.post("/tasks", json={"title": "Pairing", "collaborators": ["E001"]}, headers=auth_headers(colleague))
    assert api.get_unread_count() == 1

    notifications = api.get_notifications()
    assert notifications[0]["type"] == "Shared Task"
    assert api.mark_as_read(notifications[0]["id"])["read"] is True
    assert api.mark_all_as_read()["updated_count"] == 0


def test_client_read_failures_fall_back(api):
    assert api.get_unread_count() is None
    assert api.last_error == "HTTP 401: Missing access token"
    assert api.get_notifications() == []
    assert api.mark_as_read(1) is None


def test_client_login_failure_raises(api, staff):
    with pytest.raises(TaskHubError) as excinfo:
        api.login(staff.email, "wrong-password")
    assert excinfo.value.status_code == 401


def test_trigger_deadline_check_cooldown(api, client, staff):
    api.login(staff.email, PASSWORD)
    due = (date.today() + timedelta(days=7)).isoformat()
    client.post("/tasks", json={"title": "Renewal", "due_date": due}, headers=auth_headers(staff))

    first = api.trigger_deadline_check()
    assert first["upcoming"]["notificationsCreated"] == 1
    assert api.last_deadline_result == first

    assert api.trigger_deadline_check() == {"skipped": True, "reason": "cooldown"}

    forced = api.trigger_deadline_check(force=True)
    assert forced["upcoming"]["duplicatesPrevented"] == 1

    api.clock.now += 121
    again = api.trigger_deadline_check()
    assert again["upcoming"]["skipped"] is True

    assert api.get_deadline_status()["cooldown_active"] is True


def test_trigger_deadline_check_records_errors(api):
    with pytest.raises(TaskHubError):
        api.trigger_deadline_check()
    assert "401" in api.last_deadline_result["error"]
