from datetime import date, datetime, timedelta, timezone

import pytest

from taskhub.models import Notification, NotificationType, Task
from taskhub.services import deadline_notifications
from taskhub.services.deadline_notifications import (
    DeadlineNotificationService,
    missed_title,
    task_recipients,
    upcoming_title,
)


@pytest.fixture
def service():
    return DeadlineNotificationService(cooldown_seconds=300, check_days=[1, 3, 7])


def add_task(db, title, days_from_today, owner="E001", collaborators=None, status="ongoing"):
    task = Task(
        title=title,
        owner_id=owner,
        collaborators=collaborators or [],
        due_date=date.today() + timedelta(days=days_from_today),
        status=status,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def notifications_for(db, task):
    return db.query(Notification).filter(Notification.task_id == task.id).order_by(Notification.id).all()


def test_titles():
    assert upcoming_title(3, "Budget") == "3 days before Budget is due"
    assert missed_title("Budget") == "Overdue: Budget deadline has passed"


def test_recipients_are_deduplicated():
    task = Task(owner_id="E001", collaborators=["E002", "E001", "E002", None])
    assert task_recipients(task) == ["E001", "E002"]


def test_upcoming_notifies_owner_and_collaborators(db, service):
    task = add_task(db, "Budget", 3, collaborators=["E002"])
    add_task(db, "Later", 5)
    add_task(db, "Done", 1, status="completed")

    result = service.check_upcoming_deadlines(db)
    assert result["success"] is True
    assert result["notificationsCreated"] == 2
    assert result["tasksChecked"] == 1

    rows = notifications_for(db, task)
    assert [(n.emp_id, n.type) for n in rows] == [
        ("E001", NotificationType.UPCOMING_DEADLINE),
        ("E002", NotificationType.UPCOMING_DEADLINE),
    ]
    assert rows[0].title == "3 days before Budget is due"
    assert rows[0].notification_category == "deadline"


def test_cooldown_skips_repeat_checks(db, service):
    add_task(db, "Budget", 1)
    service.check_upcoming_deadlines(db)

    skipped = service.check_upcoming_deadlines(db)
    assert skipped["skipped"] is True
    assert skipped["message"] == "Deadline check skipped due to cooldown"
    assert 1 <= skipped["remainingMinutes"] <= 5
    assert service.get_status()["cooldown_active"] is True


def test_force_bypasses_cooldown_but_not_dedup(db, service):
    add_task(db, "Budget", 7, collaborators=["E002"])
    service.check_upcoming_deadlines(db)

    forced = service.check_upcoming_deadlines(db, force=True)
    assert "skipped" not in forced
    assert forced["notificationsCreated"] == 0
    assert forced["duplicatesPrevented"] == 2


def test_expired_cooldown_allows_check(db, service):
    service.last_check = datetime.now(timezone.utc) - timedelta(minutes=10)
    result = service.check_upcoming_deadlines(db)
    assert "skipped" not in result
    assert service.get_status()["last_check"] is not None


def test_missed_deadlines(db, service):
    overdue = add_task(db, "Report", -2, collaborators=["E002", "E003"])
    add_task(db, "Closed", -2, status="completed")

    result = service.check_missed_deadlines(db)
    assert result["overdueTasks"] == 1
    assert result["notificationsCreated"] == 3

    again = service.check_missed_deadlines(db)
    assert again["notificationsCreated"] == 0
    assert again["duplicatesPrevented"] == 3

    rows = notifications_for(db, overdue)
    assert {n.type for n in rows} == {NotificationType.DEADLINE_MISSED}
    assert rows[0].title == "Overdue: Report deadline has passed"


def test_read_notification_is_not_recreated(db, service):
    task = add_task(db, "Report", -1)
    service.check_missed_deadlines(db)
    row = notifications_for(db, task)[0]
    row.read = True
    db.commit()

    result = service.check_missed_deadlines(db)
    assert result["notificationsCreated"] == 0
    assert len(notifications_for(db, task)) == 1


def test_run_deadline_checks_totals(db, service):
    add_task(db, "Soon", 1)
    add_task(db, "Late", -1)
    result = service.run_deadline_checks(db)
    assert result["upcoming"]["notificationsCreated"] == 1
    assert result["missed"]["notificationsCreated"] == 1
    assert result["totalNotificationsCreated"] == 2


def test_background_runner_uses_singleton(db):
    add_task(db, "Soon", 3)
    result = deadline_notifications.run_deadline_checks_in_background(force=True)
    assert result["totalNotificationsCreated"] == 1
    assert deadline_notifications.deadline_service.last_check is not None
