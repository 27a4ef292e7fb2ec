from tests.conftest import auth_headers
from taskhub.routers.subtasks import normalize_priority


def make_parent(client, owner, **fields):
    payload = {"title": "Parent task"}
    payload.update(fields)
    return client.post("/tasks", json=payload, headers=auth_headers(owner)).json()


def add_subtask(client, owner, parent_id, **fields):
    payload = {"parent_task_id": parent_id, "title": "Step"}
    payload.update(fields)
    return client.post("/subtasks", json=payload, headers=auth_headers(owner))


def test_normalize_priority():
    assert normalize_priority("7") == 7
    assert normalize_priority(10) == 10
    assert normalize_priority(0) is None
    assert normalize_priority(11) is None
    assert normalize_priority("high") is None
    assert normalize_priority("") is None


def test_create_and_list_sorted_by_priority(client, staff):
    parent = make_parent(client, staff)
    add_subtask(client, staff, parent["id"], title="Low", priority=2)
    add_subtask(client, staff, parent["id"], title="None")
    response = add_subtask(client, staff, parent["id"], title="  High  ", priority="9")
    assert response.status_code == 201
    assert response.json()["subtask"]["title"] == "High"
    assert response.json()["subtask"]["owner_id"] == "E001"

    subtasks = client.get(f"/subtasks/task/{parent['id']}", headers=auth_headers(staff)).json()["subtasks"]
    assert [s["title"] for s in subtasks] == ["High", "Low", "None"]


def test_create_requires_parent_and_title(client, staff):
    response = client.post("/subtasks", json={"title": "Orphan"}, headers=auth_headers(staff))
    assert response.status_code == 400
    assert response.json() == {"error": "parent_task_id and title are required"}

    parent = make_parent(client, staff)
    blank = add_subtask(client, staff, parent["id"], title="   ")
    assert blank.status_code == 400


def test_only_parent_owner_can_manage_subtasks(client, staff, colleague):
    parent = make_parent(client, staff, collaborators=["E002"])
    denied = add_subtask(client, colleague, parent["id"])
    assert denied.status_code == 403
    assert denied.json() == {"error": "Only the task owner can add subtasks"}

    subtask = add_subtask(client, staff, parent["id"]).json()["subtask"]
    edit = client.put(f"/subtasks/{subtask['id']}", json={"title": "x"}, headers=auth_headers(colleague))
    assert edit.status_code == 403
    assert edit.json() == {"error": "Only the task owner can edit subtasks"}
    remove = client.delete(f"/subtasks/{subtask['id']}", headers=auth_headers(colleague))
    assert remove.json() == {"error": "Only the task owner can delete subtasks"}

    # collaborators may still read them
    listed = client.get(f"/subtasks/task/{parent['id']}", headers=auth_headers(colleague))
    assert listed.status_code == 200


def test_missing_parent_is_404(client, staff):
    response = add_subtask(client, staff, 4242)
    assert response.status_code == 404
    assert response.json() == {"error": "Parent task not found"}


def test_update_ignores_invalid_priority_and_records_history(client, staff):
    parent = make_parent(client, staff)
    subtask = add_subtask(client, staff, parent["id"], priority=3).json()["subtask"]

    response = client.put(
        f"/subtasks/{subtask['id']}",
        json={"priority": 42, "status": "completed", "description": ""},
        headers=auth_headers(staff),
    )
    assert response.status_code == 200
    updated = response.json()["subtask"]
    assert updated["priority"] == 3
    assert updated["status"] == "completed"
    assert updated["description"] is None

    history = client.get(f"/tasks/{parent['id']}/history", headers=auth_headers(staff)).json()
    actions = [h["action"] for h in history]
    assert "subtask_create" in actions
    assert "subtask_update" in actions


def test_delete_subtask(client, staff):
    parent = make_parent(client, staff)
    subtask = add_subtask(client, staff, parent["id"]).json()["subtask"]

    assert client.delete(f"/subtasks/{subtask['id']}", headers=auth_headers(staff)).json() == {"ok": True}
    assert client.delete(f"/subtasks/{subtask['id']}", headers=auth_headers(staff)).status_code == 404
    listed = client.get(f"/subtasks/task/{parent['id']}", headers=auth_headers(staff)).json()
    assert listed == {"subtasks": []}


def test_status_must_be_a_task_status(client, staff):
    parent = make_parent(client, staff)
    invalid = add_subtask(client, staff, parent["id"], status="banana")
    assert invalid.status_code == 400
    assert invalid.json()["error"] == "Validation failed"

    subtask = add_subtask(client, staff, parent["id"], status="under review").json()["subtask"]
    assert subtask["status"] == "under review"

    bad_update = client.put(f"/subtasks/{subtask['id']}", json={"status": "banana"}, headers=auth_headers(staff))
    assert bad_update.status_code == 400


def test_null_status_on_update_is_rejected(client, staff):
    parent = make_parent(client, staff)
    subtask = add_subtask(client, staff, parent["id"]).json()["subtask"]

    response = client.put(f"/subtasks/{subtask['id']}", json={"status": None}, headers=auth_headers(staff))
    assert response.status_code == 400
    assert response.json()["error"] == "Validation failed"

    listed = client.get(f"/subtasks/task/{parent['id']}", headers=auth_headers(staff)).json()["subtasks"]
    assert listed[0]["status"] == "ongoing"
