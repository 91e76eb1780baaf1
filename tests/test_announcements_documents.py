import json

import pytest

from edubridge.repositories.enrollment_repository import EnrollmentRepository
from edubridge.repositories.program_repository import ProgramRepository
from edubridge.schemas.announcement import AnnouncementCommentCreate, AnnouncementCreate
from edubridge.services.announcement_service import AnnouncementService
from edubridge.utils import realtime_bus
from edubridge.utils.errors import NotFoundError
from edubridge.utils.websocket_manager import manager

from conftest import auth_header


class RecordingSocket:

    def __init__(self):
        self.sent = []

    async def send_text(self, message):
        self.sent.append(json.loads(message))


@pytest.fixture
def local_bus(monkeypatch):
    monkeypatch.setattr(realtime_bus, "_bus", realtime_bus.LocalBus())


@pytest.fixture
async def course(db, make_user):
    staff = await make_user("Mr Staff", role="STAFF")
    student = await make_user("Stu")
    program = await ProgramRepository(db).create_program(
        {"name": "History", "description": "Ancient to modern history", "duration": 6, "capacity": 10},
        created_by_id=staff["_id"],
    )
    enrollment = await EnrollmentRepository(db).create_enrollment(student["_id"], program["_id"], status="APPROVED")
    return staff, student, program, enrollment


async def test_announcement_reaches_enrolled_students(db, course, local_bus):
    staff, student, program, _ = course
    socket = RecordingSocket()
    manager.active_connections[student["_id"]] = [socket]
    try:
        announcement = await AnnouncementService(db).create(
            AnnouncementCreate(title="Exam", content="The exam moves to Friday", program_id=program["_id"]),
            staff["_id"],
        )
    finally:
        manager.active_connections.pop(student["_id"], None)

    assert socket.sent == [{
        "type": "announcement",
        "announcement_id": announcement.id,
        "program_id": program["_id"],
        "title": "Exam",
    }]


async def test_announcement_listing_and_comments(db, course, local_bus):
    staff, student, program, _ = course
    service = AnnouncementService(db)
    announcement = await service.create(
        AnnouncementCreate(title="Welcome", content="Welcome to the history course", program_id=program["_id"]),
        staff["_id"],
    )
    await service.add_comment(announcement.id, AnnouncementCommentCreate(content="Thanks!"), student["_id"])

    listed = await service.list_for_student(student["_id"])
    assert [(a.title, a.comment_count, a.program.name) for a in listed] == [("Welcome", 1, "History")]

    detail = await service.get(announcement.id)
    assert detail.created_by.name == "Mr Staff"
    assert [c.user.name for c in detail.comments] == ["Stu"]

    with pytest.raises(NotFoundError):
        await service.add_comment("65a000000000000000000000", AnnouncementCommentCreate(content="?"), student["_id"])


async def test_document_upload_and_delete(client, course, make_user):
    staff, student, _, enrollment = course
    stranger = await make_user("Stranger")

    resp = await client.post(
        "/documents",
        files={"file": ("transcript.pdf", b"%PDF-1.4 fake", "application/pdf")},
        data={"enrollment_id": enrollment["_id"]},
        headers=auth_header(student),
    )
    assert resp.status_code == 201
    document = resp.json()
    assert document["url"] == "https://example.com/files/transcript.pdf"
    assert document["size"] == len(b"%PDF-1.4 fake")
    assert document["type"] == "application/pdf"

    resp = await client.get(f"/documents/enrollment/{enrollment['_id']}", headers=auth_header(staff))
    assert [d["name"] for d in resp.json()] == ["transcript.pdf"]

    resp = await client.delete(f"/documents/{document['id']}", headers=auth_header(stranger))
    assert resp.status_code == 403

    resp = await client.delete(f"/documents/{document['id']}", headers=auth_header(student))
    assert resp.json() == {"success": True}
    resp = await client.get("/documents/me", headers=auth_header(student))
    assert resp.json() == []


async def test_document_for_unknown_enrollment(client, course):
    _, student, _, _ = course
    resp = await client.post(
        "/documents",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        data={"enrollment_id": "65a000000000000000000000"},
        headers=auth_header(student),
    )
    assert resp.status_code == 404
