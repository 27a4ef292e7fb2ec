from datetime import date, timedelta

from tests.conftest import auth_headers
from taskhub.models import Notification, NotificationType


def create_task(client, user, **fields):
    payload = {"title": "Quarterly report", "priority": 5}
    payload.update(fields)
    response = client.post("/tasks", json=payload, headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()


def test_create_task_sets_owner_and_defaults(client, staff):
    task = create_task(client, staff, due_date="2030-01-15")
    assert task["owner_id"] == "E001"
    assert task["status"] == "ongoing"
    assert task["collaborators"] == []
    assert task["manager"] == {"emp_id": "E001", "name": "Alice Tan", "department": "Engineering"}


def test_create_task_rejects_priority_out_of_range(client, staff):
    response = client.post("/tasks", json={"title": "x", "priority": 11}, headers=auth_headers(staff))
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"


def test_collaborators_are_notified_on_create(client, db, staff, colleague):
    task = create_task(client, staff, collaborators=["E002", "E001"])

    notifications = db.query(Notification).filter(Notification.task_id == task["id"]).all()
    assert [n.emp_id for n in notifications] == ["E002"]
    assert notifications[0].type == NotificationType.SHARED_TASK
    assert notifications[0].title == 'Added as collaborator for "Quarterly report"'
    assert "Alice Tan" in notifications[0].description


def test_list_includes_owned_and_shared_tasks(client, staff, colleague, outsider):
    create_task(client, staff, title="Mine")
    create_task(client, colleague, title="Shared", collaborators=["E001"])
    create_task(client, outsider, title="Not mine")

    response = client.get("/tasks", headers=auth_headers(staff))
    assert response.status_code == 200
    titles = sorted(t["title"] for t in response.json()["tasks"])
    assert titles == ["Mine", "Shared"]

    shared = next(t for t in response.json()["tasks"] if t["title"] == "Shared")
    assert shared["manager"]["emp_id"] == "E002"


def test_get_task_access_control(client, staff, outsider):
    task = create_task(client, staff)

    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(staff)).status_code == 200
    forbidden = client.get(f"/tasks/{task['id']}", headers=auth_headers(outsider))
    assert forbidden.status_code == 403
    assert client.get("/tasks/9999", headers=auth_headers(staff)).status_code == 404


def test_only_owner_can_update(client, staff, colleague):
    task = create_task(client, staff, collaborators=["E002"])
    response = client.put(f"/tasks/{task['id']}", json={"title": "Hijacked"}, headers=auth_headers(colleague))
    assert response.status_code == 404


def test_update_records_history(client, staff):
    task = create_task(client, staff)
    response = client.put(
        f"/tasks/{task['id']}",
        json={"status": "under review", "due_date": "2030-02-01"},
        headers=auth_headers(staff),
    )
    assert response.status_code == 200
    assert response.json()["status"] == "under review"

    history = client.get(f"/tasks/{task['id']}/history", headers=auth_headers(staff)).json()
    actions = [entry["action"] for entry in history]
    assert actions[0] == "update"
    assert "create" in actions
    assert history[0]["details"]["status"] == {"from": "ongoing", "to": "under review"}
    assert history[0]["details"]["due_date"]["to"] == "2030-02-01"


def test_update_notifies_only_new_collaborators(client, db, staff, colleague, outsider):
    task = create_task(client, staff, collaborators=["E002"])
    client.put(
        f"/tasks/{task['id']}",
        json={"collaborators": ["E002", "E003"]},
        headers=auth_headers(staff),
    )

    shared = (
        db.query(Notification)
        .filter(Notification.task_id == task["id"], Notification.type == NotificationType.SHARED_TASK)
        .all()
    )
    assert sorted(n.emp_id for n in shared) == ["E002", "E003"]


def test_completing_recurring_task_creates_next_occurrence(client, staff):
    task = create_task(
        client,
        staff,
        due_date="2030-03-10",
        is_recurring=True,
        recurrence_pattern="daily",
        recurrence_interval=2,
        recurrence_count=3,
    )
    assert task["recurrence_count"] == 1
    assert task["recurrence_max_count"] == 3
    assert task["recurrence_series_id"]

    response = client.put(f"/tasks/{task['id']}", json={"status": "completed"}, headers=auth_headers(staff))
    assert response.status_code == 200
    body = response.json()
    assert body["last_completed_date"] == date.today().isoformat()
    assert body["next_occurrence_date"] == "2030-03-12"

    nxt = body["next_occurrence"]
    assert nxt["due_date"] == "2030-03-12"
    assert nxt["status"] == "ongoing"
    assert nxt["recurrence_count"] == 2
    assert nxt["parent_recurrence_id"] == task["id"]
    assert nxt["recurrence_series_id"] == task["recurrence_series_id"]

    series = client.get(f"/tasks/recurrence/{task['recurrence_series_id']}", headers=auth_headers(staff))
    assert [t["due_date"] for t in series.json()] == ["2030-03-10", "2030-03-12"]


def test_recurring_series_stops_at_max_count(client, staff):
    task = create_task(
        client,
        staff,
        due_date="2030-03-10",
        is_recurring=True,
        recurrence_pattern="weekly",
        recurrence_count=1,
    )
    response = client.put(f"/tasks/{task['id']}", json={"status": "completed"}, headers=auth_headers(staff))
    assert response.json()["next_occurrence"] is None


def test_subtasks_are_copied_to_next_occurrence(client, staff):
    task = create_task(client, staff, due_date="2030-03-10", is_recurring=True, recurrence_pattern="monthly")
    client.post(
        "/subtasks",
        json={"parent_task_id": task["id"], "title": "Collect numbers", "priority": 4},
        headers=auth_headers(staff),
    )

    body = client.put(f"/tasks/{task['id']}", json={"status": "completed"}, headers=auth_headers(staff)).json()
    next_id = body["next_occurrence"]["id"]
    assert body["next_occurrence"]["due_date"] == "2030-04-10"

    subtasks = client.get(f"/subtasks/task/{next_id}", headers=auth_headers(staff)).json()["subtasks"]
    assert [(s["title"], s["status"]) for s in subtasks] == [("Collect numbers", "ongoing")]


def test_project_task_lookups(client, staff):
    project = client.post("/projects", json={"title": "Apollo"}, headers=auth_headers(staff)).json()
    create_task(client, staff, title="Design", project_id=project["id"])
    create_task(client, staff, title="Loose")

    by_project = client.get(f"/tasks/project/{project['id']}", headers=auth_headers(staff)).json()
    assert [t["title"] for t in by_project] == ["Design"]

    bulk = client.post("/tasks/bulk", json={"project_ids": [project["id"]]}, headers=auth_headers(staff))
    assert [t["title"] for t in bulk.json()] == ["Design"]

    assert client.post("/tasks/bulk", json={"project_ids": []}, headers=auth_headers(staff)).json() == []
    missing = client.post("/tasks/bulk", json={}, headers=auth_headers(staff))
    assert missing.status_code == 400
    assert missing.json() == {"error": "project_ids array is required"}


def test_delete_task(client, staff, colleague):
    task = create_task(client, staff, due_date=(date.today() + timedelta(days=5)).isoformat())

    assert client.delete(f"/tasks/{task['id']}", headers=auth_headers(colleague)).status_code == 404
    response = client.delete(f"/tasks/{task['id']}", headers=auth_headers(staff))
    assert response.json() == {"ok": True}
    assert client.get(f"/tasks/{task['id']}", headers=auth_headers(staff)).status_code == 404


def test_null_for_required_fields_is_rejected(client, staff):
    task = create_task(client, staff)

    for field in ("status", "title", "is_recurring"):
        response = client.put(f"/tasks/{task['id']}", json={field: None}, headers=auth_headers(staff))
        assert response.status_code == 400, field
        assert response.json()["error"] == "Validation failed"

    created = client.post("/tasks", json={"title": "x", "status": None}, headers=auth_headers(staff))
    assert created.status_code == 400

    unchanged = client.get(f"/tasks/{task['id']}", headers=auth_headers(staff)).json()
    assert (unchanged["status"], unchanged["title"]) == ("ongoing", "Quarterly report")


def test_list_matches_whole_collaborator_ids(client, make_user, staff, colleague):
    prefix = make_user("E00", name="Dan Ho")
    create_task(client, colleague, title="Shared", collaborators=["E001"])
    create_task(client, prefix, title="Own")

    titles = [t["title"] for t in client.get("/tasks", headers=auth_headers(prefix)).json()["tasks"]]
    assert titles == ["Own"]
    titles = [t["title"] for t in client.get("/tasks", headers=auth_headers(staff)).json()["tasks"]]
    assert titles == ["Shared"]
