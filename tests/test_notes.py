"""Tests for note CRUD and tenant isolation."""

import pytest
from httpx import AsyncClient
from sqlmodel import select

from notes_app.models.note import NoteTag


async def _create(client: AsyncClient, headers: dict, **fields) -> dict:
    payload = {"title": "A note", "content": "Some content"}
    payload.update(fields)
    resp = await client.post("/api/notes", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]["note"]


@pytest.mark.asyncio
async def test_create_and_get_note(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-create")

    resp = await client.post("/api/notes", json={
        "title": "  Meeting notes  ",
        "content": "Discuss roadmap",
        "tags": ["work", " planning ", "work", ""],
        "priority": "high",
        "category": "Meetings",
    }, headers=ctx["member_headers"])
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Note created successfully"
    note = body["data"]["note"]
    assert note["title"] == "Meeting notes"
    assert note["tags"] == ["work", "planning"]
    assert note["priority"] == "high"
    assert note["category"] == "Meetings"
    assert note["isArchived"] is False
    assert note["tenantId"] == ctx["tenant"].id
    assert note["createdBy"]["id"] == ctx["member"].id
    assert note["createdBy"]["email"] == "member@notes-create.com"
    assert len(note["id"]) == 24

    resp = await client.get(f"/api/notes/{note['id']}", headers=ctx["admin_headers"])
    assert resp.status_code == 200
    fetched = resp.json()["data"]["note"]
    assert fetched["id"] == note["id"]
    assert fetched["content"] == "Discuss roadmap"


@pytest.mark.asyncio
async def test_create_note_defaults(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-defaults")

    note = await _create(client, ctx["member_headers"])
    assert note["tags"] == []
    assert note["priority"] == "medium"
    assert note["category"] == ""


@pytest.mark.asyncio
@pytest.mark.parametrize("payload, field", [
    ({"content": "no title"}, "title"),
    ({"title": "   ", "content": "blank title"}, "title"),
    ({"title": "t" * 201, "content": "x"}, "title"),
    ({"title": "no content"}, "content"),
    ({"title": "t", "content": "x" * 10001}, "content"),
    ({"title": "t", "content": "x", "priority": "urgent"}, "priority"),
    ({"title": "t", "content": "x", "tags": [str(i) for i in range(11)]}, "tags"),
    ({"title": "t", "content": "x", "tags": ["t" * 51]}, "tags.0"),
    ({"title": "t", "content": "x", "category": "c" * 101}, "category"),
    ({"title": "t", "content": "x", "tenantId": "0" * 24}, "tenantId"),
])
async def test_create_note_validation(client: AsyncClient, bootstrap, payload, field):
    ctx = await bootstrap("notes-invalid")

    resp = await client.post("/api/notes", json=payload, headers=ctx["member_headers"])
    assert resp.status_code == 400
    body = resp.json()
    assert body["message"] == "Validation Error"
    assert any(e.startswith(f"{field}:") for e in body["errors"]), body["errors"]


@pytest.mark.asyncio
async def test_get_note_malformed_id(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-bad-id")

    resp = await client.get("/api/notes/not-an-id", headers=ctx["member_headers"])
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_get_note_unknown_id(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-missing")

    resp = await client.get(f"/api/notes/{'a' * 24}", headers=ctx["member_headers"])
    assert resp.status_code == 404
    assert resp.json() == {"success": False, "message": "Note not found"}


@pytest.mark.asyncio
async def test_other_tenant_note_is_invisible(client: AsyncClient, bootstrap):
    """Cross-tenant reads, writes and deletes all look like a missing note."""
    acme = await bootstrap("iso-acme")
    globex = await bootstrap("iso-globex")
    note = await _create(client, acme["member_headers"], title="Acme secret")

    headers = globex["admin_headers"]
    url = f"/api/notes/{note['id']}"
    assert (await client.get(url, headers=headers)).status_code == 404
    assert (await client.put(url, json={"title": "pwned"}, headers=headers)).status_code == 404
    assert (await client.patch(f"{url}/archive", headers=headers)).status_code == 404
    assert (await client.delete(url, headers=headers)).status_code == 404

    listing = await client.get("/api/notes", headers=headers)
    assert listing.json()["data"]["notes"] == []

    # Untouched for the owner
    resp = await client.get(url, headers=acme["member_headers"])
    assert resp.json()["data"]["note"]["title"] == "Acme secret"


@pytest.mark.asyncio
async def test_update_note(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-update")
    note = await _create(client, ctx["member_headers"], tags=["old"], category="Inbox")

    resp = await client.put(f"/api/notes/{note['id']}", json={
        "title": "Renamed",
        "tags": ["new", "shiny"],
    }, headers=ctx["member_headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Note updated successfully"
    updated = body["data"]["note"]
    assert updated["title"] == "Renamed"
    assert updated["tags"] == ["new", "shiny"]
    assert updated["content"] == note["content"]
    assert updated["category"] == "Inbox"
    assert updated["createdBy"]["id"] == ctx["member"].id
    assert updated["updatedAt"] >= note["updatedAt"]

    # Tag filter follows the new tags
    by_old = await client.get("/api/notes", params={"tags": "old"}, headers=ctx["member_headers"])
    assert by_old.json()["data"]["pagination"]["total"] == 0
    by_new = await client.get("/api/notes", params={"tags": "shiny"}, headers=ctx["member_headers"])
    assert by_new.json()["data"]["pagination"]["total"] == 1


@pytest.mark.asyncio
async def test_update_cannot_move_note_between_tenants(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-move")
    other = await bootstrap("notes-move-target")
    note = await _create(client, ctx["member_headers"])

    resp = await client.put(f"/api/notes/{note['id']}", json={
        "title": "Moved?",
        "tenantId": other["tenant"].id,
    }, headers=ctx["member_headers"])
    assert resp.status_code == 400

    resp = await client.get(f"/api/notes/{note['id']}", headers=ctx["member_headers"])
    fetched = resp.json()["data"]["note"]
    assert fetched["tenantId"] == ctx["tenant"].id
    assert fetched["title"] == "A note"


@pytest.mark.asyncio
async def test_update_requires_a_field(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-empty-update")
    note = await _create(client, ctx["member_headers"])

    resp = await client.put(f"/api/notes/{note['id']}", json={}, headers=ctx["member_headers"])
    assert resp.status_code == 400
    assert "At least one field must be provided" in resp.json()["errors"]


@pytest.mark.asyncio
async def test_update_rejects_null(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-null-update")
    note = await _create(client, ctx["member_headers"])

    resp = await client.put(f"/api/notes/{note['id']}", json={
        "title": None,
    }, headers=ctx["member_headers"])
    assert resp.status_code == 400
    assert "title cannot be null" in resp.json()["errors"]


@pytest.mark.asyncio
async def test_delete_note(client: AsyncClient, session, bootstrap):
    ctx = await bootstrap("notes-delete")
    note = await _create(client, ctx["member_headers"], tags=["gone"])

    resp = await client.delete(f"/api/notes/{note['id']}", headers=ctx["member_headers"])
    assert resp.status_code == 200
    assert resp.json() == {"success": True, "message": "Note deleted successfully"}

    resp = await client.get(f"/api/notes/{note['id']}", headers=ctx["member_headers"])
    assert resp.status_code == 404

    leftover = await session.execute(select(NoteTag).where(NoteTag.note_id == note["id"]))
    assert leftover.first() is None

    resp = await client.delete(f"/api/notes/{note['id']}", headers=ctx["member_headers"])
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_toggle_archive(client: AsyncClient, bootstrap):
    ctx = await bootstrap("notes-archive")
    note = await _create(client, ctx["member_headers"], title="Keep me", priority="low")
    url = f"/api/notes/{note['id']}/archive"

    resp = await client.patch(url, headers=ctx["member_headers"])
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Note archived successfully"
    archived = body["data"]["note"]
    assert archived["isArchived"] is True
    assert archived["title"] == "Keep me"
    assert archived["priority"] == "low"

    resp = await client.patch(url, headers=ctx["member_headers"])
    assert resp.json()["message"] == "Note unarchived successfully"
    assert resp.json()["data"]["note"]["isArchived"] is False


@pytest.mark.asyncio
async def test_notes_require_auth(client: AsyncClient):
    resp = await client.get("/api/notes")
    assert resp.status_code == 401
    resp = await client.post("/api/notes", json={"title": "t", "content": "c"})
    assert resp.status_code == 401
