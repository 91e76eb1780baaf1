from bson import ObjectId

from edubridge.config import Settings, get_settings
from edubridge.main import app

from conftest import auth_header


PROGRAM = {
    "name": "Data Science",
    "description": "Statistics, Python and machine learning",
    "duration": 12,
    "capacity": 1,
}


async def test_register_login_and_me(client):
    resp = await client.post("/auth/register", json={
        "name": "Alice",
        "email": "alice@example.com",
        "password": "secret123",
        "phone": "0123456789",
    })
    assert resp.status_code == 201
    assert resp.json()["role"] == "STUDENT"
    assert "hashed_password" not in resp.json()

    resp = await client.post("/auth/login", json={"email": "alice@example.com", "password": "secret123"})
    assert resp.status_code == 200
    token = resp.json()["access_token"]

    resp = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["email"] == "alice@example.com"


async def test_duplicate_registration_conflicts(client, make_user):
    await make_user(email="taken@example.com")
    resp = await client.post("/auth/register", json={
        "name": "Bob",
        "email": "taken@example.com",
        "password": "secret123",
        "phone": "0123456789",
    })
    assert resp.status_code == 409
    assert resp.json() == {"error": "User with this email already exists", "kind": "conflict"}


async def test_wrong_password_is_unauthorized(client, make_user):
    await make_user(email="carol@example.com", password="right-one")
    resp = await client.post("/auth/login", json={"email": "carol@example.com", "password": "wrong-one"})
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthorized"


async def test_validation_error_reports_first_message(client):
    resp = await client.post("/auth/register", json={
        "name": "A",
        "email": "short@example.com",
        "password": "secret123",
        "phone": "0123456789",
    })
    assert resp.status_code == 422
    assert resp.json() == {"error": "Name must be at least 2 characters", "kind": "validation"}


async def test_missing_token(client):
    resp = await client.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["kind"] == "unauthorized"


async def test_bypass_mode_logs_in_as_admin(client):
    settings = Settings()
    settings.auth_mode = "bypass"
    app.dependency_overrides[get_settings] = lambda: settings

    resp = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
    assert resp.status_code == 200
    assert resp.json()["user"]["role"] == "ADMIN"

    token = resp.json()["access_token"]
    resp = await client.get("/users", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


async def test_bypass_admin_is_a_stored_user(client, db, make_user):
    settings = Settings()
    settings.auth_mode = "bypass"
    app.dependency_overrides[get_settings] = lambda: settings
    student = await make_user("Sam")

    first = await client.post("/auth/login", json={"email": "nobody@example.com", "password": "x"})
    second = await client.post("/auth/login", json={"email": "someone@example.com", "password": "y"})
    admin_id = first.json()["user"]["id"]
    assert second.json()["user"]["id"] == admin_id
    assert ObjectId.is_valid(admin_id)
    assert await db.users.count_documents({"role": "ADMIN"}) == 1

    token = first.json()["access_token"]
    resp = await client.post("/messages", json={"content": "Welcome aboard", "receiver_id": student["_id"]}, headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 201

    resp = await client.get("/messages/conversations", headers=auth_header(student))
    assert [c["partner_id"] for c in resp.json()] == [admin_id]
    assert resp.json()[0]["partner"]["name"] == "Admin User"

    # the stored admin has no usable password once bypass is switched off
    settings.auth_mode = "password"
    resp = await client.post("/auth/login", json={"email": "admin@example.com", "password": "anything"})
    assert resp.status_code == 401


async def test_students_cannot_create_programs(client, make_user):
    student = await make_user()
    resp = await client.post("/programs", json=PROGRAM, headers=auth_header(student))
    assert resp.status_code == 403
    assert resp.json()["kind"] == "forbidden"


async def test_enrollment_flow(client, make_user):
    staff = await make_user("Staff", role="STAFF")
    first = await make_user("First")
    second = await make_user("Second")

    resp = await client.post("/programs", json=PROGRAM, headers=auth_header(staff))
    assert resp.status_code == 201
    program_id = resp.json()["id"]

    resp = await client.post("/enrollments", json={"program_id": program_id}, headers=auth_header(first))
    assert resp.status_code == 201
    enrollment_id = resp.json()["id"]

    resp = await client.post("/enrollments", json={"program_id": program_id}, headers=auth_header(first))
    assert resp.status_code == 409
    assert resp.json()["error"] == "You are already enrolled in this program"

    resp = await client.post("/enrollments", json={"program_id": program_id}, headers=auth_header(second))
    assert resp.status_code == 409
    assert resp.json()["error"] == "Program has reached its capacity"

    resp = await client.patch(f"/enrollments/{enrollment_id}/status", json={"status": "APPROVED"}, headers=auth_header(first))
    assert resp.status_code == 403

    resp = await client.patch(f"/enrollments/{enrollment_id}/status", json={"status": "APPROVED"}, headers=auth_header(staff))
    assert resp.status_code == 200
    assert resp.json()["status"] == "APPROVED"

    resp = await client.get("/enrollments/me", headers=auth_header(first))
    assert [e["program"]["name"] for e in resp.json()] == ["Data Science"]

    resp = await client.get(f"/programs/{program_id}", headers=auth_header(first))
    assert resp.json()["seats_taken"] == 1


async def test_message_flow(client, make_user):
    alice = await make_user("Alice")
    bob = await make_user("Bob")

    resp = await client.post("/messages", json={"content": "hello", "receiver_id": bob["_id"]}, headers=auth_header(alice))
    assert resp.status_code == 201

    resp = await client.get("/messages/unread", headers=auth_header(bob))
    assert resp.json() == {"unread": 1}

    resp = await client.get("/messages/conversations", headers=auth_header(bob))
    conversations = resp.json()
    assert len(conversations) == 1
    assert conversations[0]["partner_id"] == alice["_id"]
    assert conversations[0]["unread_count"] == 1

    resp = await client.get(f"/messages/users/{alice['_id']}", headers=auth_header(bob))
    assert [m["content"] for m in resp.json()] == ["hello"]

    resp = await client.get("/messages/unread", headers=auth_header(bob))
    assert resp.json() == {"unread": 0}


async def test_message_needs_a_target(client, make_user):
    alice = await make_user("Alice")
    resp = await client.post("/messages", json={"content": "hello"}, headers=auth_header(alice))
    assert resp.status_code == 422
    assert resp.json()["error"] == "Content and either receiver ID or group ID are required"


async def test_unknown_program_is_not_found(client, make_user):
    student = await make_user()
    resp = await client.get("/programs/65a000000000000000000000", headers=auth_header(student))
    assert resp.status_code == 404
    assert resp.json() == {"error": "Program not found", "kind": "not_found"}
