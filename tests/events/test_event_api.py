from datetime import timedelta

from event_manager.app.common.utils.consts import UserRole
from event_manager.app.common.utils.datetime_utils import utcnow


def _body(**overrides) -> dict:
    start_at = utcnow() + timedelta(days=7)
    body = {
        "title": "Open Source Sprint",
        "type": "ONSITE",
        "venue": "Room 101",
        "start_at": start_at.isoformat(),
        "end_at": (start_at + timedelta(hours=6)).isoformat(),
        "total_seats": 20,
    }
    body.update(overrides)
    return body


async def test_organizer_creates_updates_and_deletes(client, make_user, login):
    organizer = await make_user(UserRole.ORGANIZER)
    headers = await login(organizer.email)

    created = await client.post("/api/v1/events", json=_body(), headers=headers)
    assert created.status_code == 201
    event = created.json()
    assert event["organizers"][0]["email"] == organizer.email

    updated = await client.patch(f"/api/v1/events/{event['id']}", json={"total_seats": 25}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["total_seats"] == 25
    assert updated.json()["title"] == "Open Source Sprint"

    mine = await client.get("/api/v1/events/mine", headers=headers)
    assert [e["id"] for e in mine.json()["events"]] == [event["id"]]

    deleted = await client.delete(f"/api/v1/events/{event['id']}", headers=headers)
    assert deleted.status_code == 200
    assert (await client.get(f"/api/v1/events/{event['id']}")).status_code == 404


async def test_participant_cannot_create_event(client, make_user, login):
    participant = await make_user()

    response = await client.post("/api/v1/events", json=_body(), headers=await login(participant.email))

    assert response.status_code == 403


async def test_invalid_event_is_422(client, make_user, login):
    organizer = await make_user(UserRole.ORGANIZER)

    response = await client.post("/api/v1/events", json=_body(venue=None), headers=await login(organizer.email))

    assert response.status_code == 422
    assert response.json()["code"] == "ValidationFailed"


async def test_public_listing_with_filters(client, make_user, make_event):
    organizer = await make_user(UserRole.ORGANIZER)
    await make_event(organizer, title="Soon", starts_in=timedelta(days=1))
    await make_event(organizer, title="Gone", starts_in=timedelta(days=-2))

    response = await client.get("/api/v1/events", params={"filter": "incoming"})

    assert response.status_code == 200
    body = response.json()
    assert [e["title"] for e in body["events"]] == ["Soon"]
    assert body["page"] == 1
    assert body["total_pages"] == 1


async def test_unknown_event_is_404(client):
    response = await client.get("/api/v1/events/12345")

    assert response.status_code == 404
    assert response.json() == {"success": False, "code": "NotFound", "detail": "Event not found"}


async def test_health(client):
    response = await client.get("/api/health")

    assert response.json() == {"status": "ok"}
