from datetime import datetime, timedelta, timezone

from app.users import service as user_service
from app.users.models import ROLE_ADMIN, ROLE_COMMENTATOR
from app.users.schema import BLANK_MESSAGE, MISMATCH_MESSAGE
from app.users.validation import EMAIL_TAKEN_MESSAGE, OLD_PASSWORD_MESSAGE, USERNAME_TAKEN_MESSAGE

from conftest import ALICE, BOB


def error_messages(response):
    return {tuple(err["loc"]): err["msg"] for err in response.json()["detail"]}


async def test_register_returns_owner_view(client):
    response = await client.post("/users/", json=ALICE)

    assert response.status_code == 201
    body = response.json()
    assert body["username"] == "alice"
    assert body["email"] == "alice@example.com"
    assert body["roles"] == [ROLE_COMMENTATOR]
    assert body["comments"] == [] and body["posts"] == []
    assert "password" not in body and "verified_password" not in body


async def test_register_stores_hashed_password(client, db):
    body = (await client.post("/users/", json=ALICE)).json()
    user = await user_service.get_user_by_id(body["id"], db)
    assert user.password != ALICE["password"]
    assert await user_service.verify_password(ALICE["password"], user.password)


async def test_register_with_mismatched_passwords(client):
    response = await client.post("/users/", json={**ALICE, "verified_password": "Other1"})

    assert response.status_code == 422
    assert error_messages(response) == {("body", "verified_password"): MISMATCH_MESSAGE}


async def test_register_duplicate_username_and_email(client, alice):
    response = await client.post("/users/", json={**BOB, "username": "alice", "email": "alice@example.com"})

    assert response.status_code == 422
    messages = error_messages(response)
    assert messages[("body", "username")] == USERNAME_TAKEN_MESSAGE
    assert messages[("body", "email")] == EMAIL_TAKEN_MESSAGE


async def test_register_collects_format_and_uniqueness_errors(client, alice):
    response = await client.post("/users/", json={**BOB, "email": "alice@example.com", "name": "Bo"})

    assert response.status_code == 422
    messages = error_messages(response)
    assert ("body", "name") in messages
    assert messages[("body", "email")] == EMAIL_TAKEN_MESSAGE


async def test_register_cannot_set_roles(client):
    response = await client.post("/users/", json={**ALICE, "roles": [ROLE_ADMIN]})
    assert response.status_code == 422
    assert ("body", "roles") in error_messages(response)


async def test_get_user_requires_authentication(client, alice):
    response = await client.get(f"/users/{alice['id']}")
    assert response.status_code == 401


async def test_get_user_hides_private_fields_from_others(client, alice, bob):
    response = await client.get(f"/users/{alice['id']}", headers=bob["headers"])

    assert response.status_code == 200
    assert set(response.json()) == {"id", "username", "name", "comments", "posts"}


async def test_get_self_includes_owner_fields(client, alice):
    response = await client.get(f"/users/{alice['id']}", headers=alice["headers"])

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == ALICE["email"]
    assert body["roles"] == [ROLE_COMMENTATOR]


async def test_admin_sees_roles_and_email(client, db, alice, bob):
    admin = await user_service.get_user_by_id(bob["id"], db)
    admin.set_roles([ROLE_ADMIN])
    await db.commit()

    response = await client.get(f"/users/{alice['id']}", headers=bob["headers"])

    assert response.status_code == 200
    assert response.json()["roles"] == [ROLE_COMMENTATOR]
    assert response.json()["email"] == ALICE["email"]


async def test_get_unknown_user(client, alice):
    response = await client.get("/users/999", headers=alice["headers"])
    assert response.status_code == 404


async def test_update_own_profile(client, alice):
    response = await client.put(
        f"/users/{alice['id']}",
        json={"name": "Alice P. Liddell"},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    assert response.json()["name"] == "Alice P. Liddell"
    assert response.json()["email"] == ALICE["email"]


async def test_update_other_user_is_forbidden(client, alice, bob):
    response = await client.put(f"/users/{alice['id']}", json={"name": "Mallory Mal"}, headers=bob["headers"])
    assert response.status_code == 403


async def test_update_rejects_password_field(client, alice):
    response = await client.put(
        f"/users/{alice['id']}",
        json={"password": "Another1"},
        headers=alice["headers"],
    )
    assert response.status_code == 422


async def test_update_email_taken_by_other_user(client, alice, bob):
    response = await client.put(
        f"/users/{alice['id']}",
        json={"email": BOB["email"]},
        headers=alice["headers"],
    )

    assert response.status_code == 422
    assert error_messages(response) == {("body", "email"): EMAIL_TAKEN_MESSAGE}


async def test_update_keeping_own_email(client, alice):
    response = await client.put(
        f"/users/{alice['id']}",
        json={"email": ALICE["email"], "name": "Alice Again"},
        headers=alice["headers"],
    )
    assert response.status_code == 200


async def test_reset_password(client, alice):
    response = await client.put(
        f"/users/{alice['id']}/reset-password",
        json={"new_password": "NewSecret3", "new_verified_password": "NewSecret3", "old_password": "Secret1"},
        headers=alice["headers"],
    )

    assert response.status_code == 200
    token = response.json()["token"]
    assert token

    me = await client.get(f"/users/{alice['id']}", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200

    old_login = await client.post("/auth/login", data={"username": "alice", "password": "Secret1"})
    assert old_login.status_code == 401
    new_login = await client.post("/auth/login", data={"username": "alice", "password": "NewSecret3"})
    assert new_login.status_code == 200


async def test_reset_password_with_wrong_old_password(client, alice):
    response = await client.put(
        f"/users/{alice['id']}/reset-password",
        json={"new_password": "NewSecret3", "new_verified_password": "NewSecret3", "old_password": "Wrong1x"},
        headers=alice["headers"],
    )

    assert response.status_code == 422
    assert error_messages(response) == {("body", "old_password"): OLD_PASSWORD_MESSAGE}


async def test_reset_password_wrong_old_password_reported_with_invalid_new(client, alice):
    response = await client.put(
        f"/users/{alice['id']}/reset-password",
        json={"new_password": "weak", "new_verified_password": "different", "old_password": "Wrong1x"},
        headers=alice["headers"],
    )

    assert response.status_code == 422
    messages = error_messages(response)
    assert messages[("body", "old_password")] == OLD_PASSWORD_MESSAGE
    assert ("body", "new_password") in messages


async def test_reset_password_of_other_user_is_forbidden(client, alice, bob):
    response = await client.put(
        f"/users/{alice['id']}/reset-password",
        json={"new_password": "NewSecret3", "new_verified_password": "NewSecret3", "old_password": "Secret1"},
        headers=bob["headers"],
    )
    assert response.status_code == 403


async def test_tokens_issued_before_password_change_are_rejected(client, db, alice):
    user = await user_service.get_user_by_id(alice["id"], db)
    user.password_change_date = datetime.now(timezone.utc) + timedelta(hours=1)
    await db.commit()

    response = await client.get(f"/users/{alice['id']}", headers=alice["headers"])
    assert response.status_code == 401


async def test_user_posts_subresource_is_public(client, alice):
    response = await client.get(f"/users/{alice['id']}/posts")
    assert response.status_code == 200
    assert response.json() == []


async def test_list_users_requires_admin(client, db, alice, bob):
    response = await client.get("/users/", headers=alice["headers"])
    assert response.status_code == 403

    admin = await user_service.get_user_by_id(alice["id"], db)
    admin.add_role(ROLE_ADMIN)
    await db.commit()

    response = await client.get("/users/", headers=alice["headers"])
    assert response.status_code == 200
    body = response.json()
    assert [u["username"] for u in body] == ["alice", "bob-2"]
    assert body[1]["email"] == BOB["email"]


async def test_update_with_null_name_is_rejected(client, alice):
    response = await client.put(f"/users/{alice['id']}", json={"name": None}, headers=alice["headers"])

    assert response.status_code == 422
    assert error_messages(response) == {("body", "name"): BLANK_MESSAGE}


async def test_update_with_null_email_is_rejected(client, alice):
    response = await client.put(f"/users/{alice['id']}", json={"email": None}, headers=alice["headers"])

    assert response.status_code == 422
    assert error_messages(response) == {("body", "email"): BLANK_MESSAGE}


async def test_register_duplicate_email_with_different_domain_case(client, alice):
    response = await client.post("/users/", json={**BOB, "email": "alice@EXAMPLE.com"})

    assert response.status_code == 422
    assert error_messages(response) == {("body", "email"): EMAIL_TAKEN_MESSAGE}


async def test_update_email_taken_with_different_domain_case(client, alice, bob):
    response = await client.put(
        f"/users/{alice['id']}",
        json={"email": "bob@EXAMPLE.com"},
        headers=alice["headers"],
    )

    assert response.status_code == 422
    assert error_messages(response) == {("body", "email"): EMAIL_TAKEN_MESSAGE}
