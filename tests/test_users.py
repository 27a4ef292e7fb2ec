from tests.conftest import auth_headers


def test_list_users_filters_roles_and_self(client, staff, colleague, make_user):
    make_user("M001", role="manager", name="Mona")

    everyone = client.get("/users", headers=auth_headers(staff)).json()["users"]
    assert [u["emp_id"] for u in everyone] == ["E001", "E002", "M001"]

    managers = client.get("/users", params={"roles": "Manager"}, headers=auth_headers(staff)).json()["users"]
    assert [u["emp_id"] for u in managers] == ["M001"]

    others = client.get(
        "/users", params={"roles": "staff,manager", "exclude_self": "true"}, headers=auth_headers(staff)
    ).json()["users"]
    assert [u["emp_id"] for u in others] == ["E002", "M001"]


def test_search_by_name(client, staff, colleague):
    results = client.get("/users/search", params={"q": "ali"}, headers=auth_headers(staff)).json()
    assert [u["emp_id"] for u in results] == ["E001"]
    assert client.get("/users/search", params={"q": " "}, headers=auth_headers(staff)).json() == []


def test_search_is_limited_to_ten(client, staff, make_user):
    for i in range(12):
        make_user(f"S{i:03d}", name=f"Sam {i:02d}")
    results = client.get("/users/search", params={"q": "sam"}, headers=auth_headers(staff)).json()
    assert len(results) == 10


def test_bulk_lookup(client, staff, colleague):
    found = client.post("/users/bulk", json={"emp_ids": ["E002", 999]}, headers=auth_headers(staff)).json()
    assert [u["name"] for u in found] == ["Bob Lim"]

    assert client.post("/users/bulk", json={"emp_ids": []}, headers=auth_headers(staff)).json() == []
    missing = client.post("/users/bulk", json={}, headers=auth_headers(staff))
    assert missing.status_code == 400
    assert missing.json() == {"error": "emp_ids array is required"}


def test_profile(client, staff, colleague):
    profile = client.get("/users/profile/E002", headers=auth_headers(staff)).json()
    assert profile["name"] == "Bob Lim"
    assert profile["department"] == "Engineering"

    missing = client.get("/users/profile/NOPE", headers=auth_headers(staff))
    assert missing.status_code == 404
    assert missing.json() == {"error": "User not found"}
