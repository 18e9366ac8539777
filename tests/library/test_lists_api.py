"""Integration tests for user lists and public list sharing."""

from httpx import AsyncClient


async def _create(client: AsyncClient, uid: str, **overrides) -> dict:
    body = {
        "name": "Weekend",
        "description": "Short ones",
        "items": [{"tmdbId": "11", "type": "movie"}, {"tmdbId": "1399", "type": "tv"}],
    }
    body.update(overrides)
    response = await client.post(f"/users/{uid}/lists", json=body)
    assert response.status_code == 200, response.text
    return response.json()["list"]


class TestOwnerLists:
    async def test_create_and_list(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        created = await _create(authed_client, uid)
        assert created["userId"] == uid
        assert created["public"] is False
        assert {i["tmdbId"] for i in created["listItems"]} == {"11", "1399"}

        lists = (await authed_client.get(f"/users/{uid}/lists")).json()["lists"]
        assert [x["id"] for x in lists] == [created["id"]]

    async def test_duplicate_items_collapse(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        created = await _create(
            authed_client, uid, items=[{"tmdbId": "11", "type": "movie"}, {"tmdbId": "11", "type": "movie"}]
        )
        assert len(created["listItems"]) == 1

    async def test_patch_applies_changes(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        created = await _create(authed_client, uid)
        response = await authed_client.patch(f"/users/{uid}/lists", json={
            "listId": created["id"],
            "name": "Weekend (updated)",
            "public": True,
            "addItems": [{"tmdbId": "603", "type": "movie"}, {"tmdbId": "11", "type": "movie"}],
            "removeItems": [{"tmdbId": "1399", "type": "tv"}],
        })
        assert response.status_code == 200
        updated = response.json()["list"]
        assert updated["name"] == "Weekend (updated)"
        assert updated["description"] == "Short ones"
        assert updated["public"] is True
        assert sorted(i["tmdbId"] for i in updated["listItems"]) == ["11", "603"]

    async def test_patch_null_description_clears_it(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        created = await _create(authed_client, uid)
        response = await authed_client.patch(
            f"/users/{uid}/lists", json={"listId": created["id"], "description": None}
        )
        assert response.json()["list"]["description"] is None

    async def test_patch_unknown_list(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.patch(f"/users/{uid}/lists", json={"listId": "nope", "name": "x"})
        assert response.status_code == 404

    async def test_delete(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        created = await _create(authed_client, uid)
        response = await authed_client.delete(f"/users/{uid}/lists/{created['id']}")
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert (await authed_client.get(f"/users/{uid}/lists")).json() == {"lists": []}
        assert (await authed_client.delete(f"/users/{uid}/lists/{created['id']}")).status_code == 404


class TestCrossUser:
    async def test_cannot_modify_someone_elses_list(self, client: AsyncClient, register):
        owner = await register()
        intruder = await register()
        owner_headers = {"Authorization": f"Bearer {owner['token']}"}
        intruder_headers = {"Authorization": f"Bearer {intruder['token']}"}

        created = (await client.post(
            f"/users/{owner['user']['id']}/lists", json={"name": "Mine"}, headers=owner_headers
        )).json()["list"]

        intruder_id = intruder["user"]["id"]
        patch = await client.patch(
            f"/users/{intruder_id}/lists", json={"listId": created["id"], "name": "Stolen"}, headers=intruder_headers
        )
        assert patch.status_code == 403
        assert patch.json() == {"detail": "Cannot modify lists you don't own"}

        delete = await client.delete(f"/users/{intruder_id}/lists/{created['id']}", headers=intruder_headers)
        assert delete.status_code == 403


class TestPublicLists:
    async def test_private_list_is_hidden(self, authed_client: AsyncClient, user):
        created = await _create(authed_client, user["user"]["id"])
        authed_client.headers.pop("Authorization")
        response = await authed_client.get(f"/lists/{created['id']}")
        assert response.status_code == 403
        assert response.json() == {"detail": "List is not public"}

    async def test_public_list_needs_no_session(self, authed_client: AsyncClient, user):
        created = await _create(authed_client, user["user"]["id"], public=True)
        authed_client.headers.pop("Authorization")
        response = await authed_client.get(f"/lists/{created['id']}")
        assert response.status_code == 200
        assert response.json()["name"] == "Weekend"
        assert len(response.json()["listItems"]) == 2

    async def test_unknown_list(self, client: AsyncClient):
        assert (await client.get("/lists/missing")).status_code == 404
