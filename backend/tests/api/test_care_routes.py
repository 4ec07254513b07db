"""Member, care note and care reminder routes."""

from datetime import datetime, timedelta, timezone


def create_member(client, headers, name="SMITH, JOHN", **fields):
    response = client.post("/api/members/", json={"name": name, **fields}, headers=headers)
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    return body["member"]


def test_member_crud(client, auth_headers):
    member = create_member(
        client, auth_headers, suburb="Hillview", createdBy="intruder", created_by="intruder"
    )
    assert member["created_by"] != "intruder"

    listed = client.get("/api/members/", headers=auth_headers).json()
    assert [m["name"] for m in listed] == ["SMITH, JOHN"]

    response = client.patch(
        f"/api/members/{member['id']}", json={"contact": "555-0100"}, headers=auth_headers
    )
    assert response.status_code == 200
    assert response.json()["contact"] == "555-0100"
    assert response.json()["suburb"] == "Hillview"

    response = client.delete(f"/api/members/{member['id']}", headers=auth_headers)
    assert response.status_code == 204
    assert client.get("/api/members/", headers=auth_headers).json() == []


def test_patch_missing_member_is_404(client, auth_headers):
    response = client.patch("/api/members/missing", json={"contact": "1"}, headers=auth_headers)
    assert response.status_code == 404


def test_blank_member_name_is_422_with_notice(client, auth_headers):
    response = client.post("/api/members/", json={"name": "   "}, headers=auth_headers)
    assert response.status_code == 422
    assert response.json()["notice"] == "Please provide a member name"


def test_care_note_edit_history(client, auth_headers):
    member = create_member(client, auth_headers)
    created = client.post(
        f"/api/members/{member['id']}/care-notes", json={"content": "X"}, headers=auth_headers
    ).json()

    response = client.patch(
        f"/api/care-notes/{created['id']}", json={"content": "Y"}, headers=auth_headers
    )
    assert response.status_code == 200
    note = response.json()
    assert note["content"] == "Y"
    assert note["created_at"] == created["created_at"]
    assert len(note["history"]) == 1
    assert note["history"][0]["content"] == "X"
    assert note["history"][0]["edited_by_name"] == "Pastor Jo"

    notes = client.get(f"/api/members/{member['id']}/care-notes", headers=auth_headers).json()
    assert [n["id"] for n in notes] == [created["id"]]


def test_blank_care_note_is_rejected(client, auth_headers):
    member = create_member(client, auth_headers)
    response = client.post(
        f"/api/members/{member['id']}/care-notes", json={"content": " "}, headers=auth_headers
    )
    assert response.status_code == 422
    assert response.json()["notice"] == "Please share a care note"


def test_care_reminders_compact_and_all_views(client, auth_headers):
    member = create_member(client, auth_headers)
    url = f"/api/members/{member['id']}/care-reminders"
    now = datetime.now(timezone.utc)
    for text, due in (
        ("expired", now - timedelta(days=3)),
        ("soon", now + timedelta(days=1)),
        ("later", now + timedelta(days=5)),
        ("much later", now + timedelta(days=9)),
        ("undated", None),
    ):
        payload = {"text": text, "due_date": due.isoformat() if due else None}
        assert client.post(url, json=payload, headers=auth_headers).status_code == 201

    compact = client.get(url, headers=auth_headers).json()
    assert [r["text"] for r in compact] == ["soon", "later", "much later"]

    everything = client.get(url, params={"view": "all"}, headers=auth_headers).json()
    assert [r["text"] for r in everything] == ["expired", "soon", "later", "much later", "undated"]
    assert everything[0]["is_expired"] is True


def test_update_and_delete_care_reminder(client, auth_headers):
    member = create_member(client, auth_headers)
    reminder = client.post(
        f"/api/members/{member['id']}/care-reminders", json={"text": "Call"}, headers=auth_headers
    ).json()
    response = client.patch(
        f"/api/care-reminders/{reminder['id']}", json={"text": "Visit"}, headers=auth_headers
    )
    assert response.json()["text"] == "Visit"
    response = client.delete(f"/api/care-reminders/{reminder['id']}", headers=auth_headers)
    assert response.status_code == 204


def test_notices_are_listed_and_dismissed(client, auth_headers):
    create_member(client, auth_headers)
    notices = client.get("/api/notices/", headers=auth_headers).json()
    assert notices[-1]["message"] == "Member added successfully"
    response = client.delete(f"/api/notices/{notices[-1]['id']}", headers=auth_headers)
    assert response.status_code == 204
    response = client.delete(f"/api/notices/{notices[-1]['id']}", headers=auth_headers)
    assert response.status_code == 404
