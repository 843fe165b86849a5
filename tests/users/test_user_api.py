from event_manager.app.common.utils.consts import UserRole


async def test_me_and_update(client, make_user, login):
    user = await make_user(full_name="Katherine Johnson")
    headers = await login(user.email)

    me = await client.get("/api/v1/users/me", headers=headers)
    assert me.status_code == 200
    assert me.json()["full_name"] == "Katherine Johnson"

    updated = await client.patch("/api/v1/users/me", json={"phone": "555-0100"}, headers=headers)
    assert updated.json()["phone"] == "555-0100"


async def test_wrong_old_password_is_400(client, make_user, login):
    user = await make_user()

    response = await client.patch(
        "/api/v1/users/me/password",
        json={"old_password": "bad-guess", "new_password": "whatever-9"},
        headers=await login(user.email),
    )

    assert response.status_code == 400
    assert response.json()["code"] == "InvalidCredentials"


async def test_admin_only_routes(client, make_user, login):
    admin = await make_user(UserRole.ADMIN)
    participant = await make_user()

    assert (await client.get("/api/v1/users", headers=await login(participant.email))).status_code == 403

    listed = await client.get("/api/v1/users", headers=await login(admin.email))
    assert listed.status_code == 200
    assert listed.json()["total_users"] == 2

    deleted = await client.delete(f"/api/v1/users/{participant.id}", headers=await login(admin.email))
    assert deleted.status_code == 200


async def test_role_is_read_from_database(client, make_user, login):
    admin = await make_user(UserRole.ADMIN)
    user = await make_user()
    stale_headers = await login(user.email)

    promoted = await client.patch(f"/api/v1/users/{user.id}/role", json={"role": "ORGANIZER"}, headers=await login(admin.email))
    assert promoted.status_code == 200

    # the same access token now passes organizer checks
    response = await client.get("/api/v1/events/mine", headers=stale_headers)
    assert response.status_code == 200
