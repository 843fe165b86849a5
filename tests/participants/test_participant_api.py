from event_manager.app.common.utils.consts import UserRole


async def test_join_and_decide_over_http(client, make_user, make_event, login, mailer):
    organizer = await make_user(UserRole.ORGANIZER)
    alice = await make_user()
    bob = await make_user()
    event = await make_event(organizer, total_seats=1, title="Launch Party")
    organizer_headers = await login(organizer.email)

    joined = await client.post("/api/v1/participants/join", json={"event_id": event.id}, headers=await login(alice.email))
    assert joined.status_code == 201
    assert joined.json()["status"] == "PENDING"
    alice_request = joined.json()["id"]

    duplicate = await client.post("/api/v1/participants/join", json={"event_id": event.id}, headers=await login(alice.email))
    assert duplicate.status_code == 400
    assert duplicate.json()["code"] == "AlreadyRequested"

    approved = await client.put(
        f"/api/v1/participants/{alice_request}/status", json={"status": "APPROVED"}, headers=organizer_headers
    )
    assert approved.status_code == 200
    assert approved.json()["data"]["status"] == "APPROVED"

    bob_request = (
        await client.post("/api/v1/participants/join", json={"event_id": event.id}, headers=await login(bob.email))
    ).json()["id"]
    full = await client.put(f"/api/v1/participants/{bob_request}/status", json={"status": "APPROVED"}, headers=organizer_headers)
    assert full.status_code == 409
    assert full.json()["code"] == "SeatsFull"

    detail = await client.get(f"/api/v1/events/{event.id}")
    assert detail.json()["confirmed_count"] == 1
    assert 'Your request for "Launch Party" has been approved' in mailer.subjects()


async def test_status_must_be_a_decision(client, make_user, make_event, login):
    organizer = await make_user(UserRole.ORGANIZER)
    alice = await make_user()
    event = await make_event(organizer)
    request_id = (
        await client.post("/api/v1/participants/join", json={"event_id": event.id}, headers=await login(alice.email))
    ).json()["id"]

    response = await client.put(
        f"/api/v1/participants/{request_id}/status", json={"status": "PENDING"}, headers=await login(organizer.email)
    )

    assert response.status_code == 422


async def test_only_participants_can_join(client, make_user, make_event, login):
    organizer = await make_user(UserRole.ORGANIZER)
    event = await make_event(organizer)

    response = await client.post("/api/v1/participants/join", json={"event_id": event.id}, headers=await login(organizer.email))

    assert response.status_code == 403
    assert response.json()["code"] == "Forbidden"


async def test_cancel_and_list_requests(client, make_user, make_event, login):
    organizer = await make_user(UserRole.ORGANIZER)
    alice = await make_user()
    first = await make_event(organizer, title="First")
    second = await make_event(organizer, title="Second")
    alice_headers = await login(alice.email)

    keep = (await client.post("/api/v1/participants/join", json={"event_id": first.id}, headers=alice_headers)).json()["id"]
    drop = (await client.post("/api/v1/participants/join", json={"event_id": second.id}, headers=alice_headers)).json()["id"]

    cancelled = await client.delete(f"/api/v1/participants/{drop}", headers=alice_headers)
    assert cancelled.status_code == 200
    again = await client.delete(f"/api/v1/participants/{drop}", headers=alice_headers)
    assert again.status_code == 404

    mine = await client.get("/api/v1/participants/my-requests", headers=alice_headers)
    assert mine.status_code == 200
    body = mine.json()
    assert body["total"] == 1
    assert body["items"][0]["id"] == keep
    assert body["items"][0]["event"]["title"] == "First"

    related = await client.get("/api/v1/participants/related/organizer?status=PENDING", headers=await login(organizer.email))
    assert related.json()["total"] == 1
    assert related.json()["items"][0]["user"]["email"] == alice.email

    roster = await client.get(f"/api/v1/events/{first.id}/participants", headers=await login(organizer.email))
    assert roster.status_code == 200
    assert [row["user"]["email"] for row in roster.json()] == [alice.email]
