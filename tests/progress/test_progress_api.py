"""Integration tests for /users/{id}/progress."""

from datetime import datetime

from httpx import AsyncClient

from mwb.progress.rules import MIN_EPOCH

MOVIE = {"title": "Heat", "year": 1995, "type": "movie"}
SHOW = {"title": "The Wire", "year": 2002, "type": "show"}


def _episode(season: str, episode: str, watched: int, duration: int = 1000, **extra) -> dict:
    return {
        "meta": SHOW,
        "duration": duration,
        "watched": watched,
        "seasonId": season,
        "episodeId": episode,
        "seasonNumber": 1,
        "episodeNumber": int(episode.lstrip("e") or 0),
        **extra,
    }


class TestPutProgress:
    async def test_acceptable_movie_is_saved(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 1200.4,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["id"]
        assert data["tmdbId"] == "949"
        assert data["userId"] == uid
        assert data["seasonId"] is None
        assert data["episodeId"] is None
        assert data["watched"] == 1200

        listed = (await authed_client.get(f"/users/{uid}/progress")).json()
        assert len(listed) == 1
        assert listed[0]["season"] == {"id": None, "number": None}

    async def test_not_started_movie_is_echoed_but_not_saved(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 1000, "watched": 5,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == ""
        assert data["duration"] == 1000
        assert data["watched"] == 5
        assert data["meta"]["title"] == "Heat"
        assert (await authed_client.get(f"/users/{uid}/progress")).json() == []

    async def test_repeat_put_updates_same_row(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        first = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 300,
        })
        second = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 900,
        })
        assert first.json()["id"] == second.json()["id"]
        listed = (await authed_client.get(f"/users/{uid}/progress")).json()
        assert len(listed) == 1
        assert listed[0]["watched"] == 900

    async def test_updated_at_before_epoch_is_clamped(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600, "updatedAt": "2000-01-01T00:00:00Z",
        })
        assert datetime.fromisoformat(response.json()["updatedAt"]) == MIN_EPOCH

    async def test_future_updated_at_is_clamped_to_now(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        before = datetime.now().astimezone()
        response = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600, "updatedAt": "2999-01-01T00:00:00Z",
        })
        after = datetime.now().astimezone()
        stored = datetime.fromisoformat(response.json()["updatedAt"])
        assert before <= stored <= after

    async def test_negative_watched_is_invalid(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": -1,
        })
        assert response.status_code == 400

    async def test_tv_meta_is_stored_as_episode(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/1396", json={
            "meta": {"title": "Breaking Bad", "type": "tv"},
            "duration": 3000,
            "watched": 900,
            "seasonId": "s1",
            "episodeId": "e1",
            "seasonNumber": 1,
            "episodeNumber": 1,
        })
        assert response.status_code == 200
        data = response.json()
        assert data["id"]
        assert data["meta"]["type"] == "tv"
        assert data["seasonId"] == "s1"
        assert data["episodeId"] == "e1"

        listed = (await authed_client.get(f"/users/{uid}/progress")).json()
        assert listed[0]["episode"] == {"id": "e1", "number": 1}

    async def test_unknown_meta_type_is_invalid(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/1", json={
            "meta": {"title": "x", "type": "podcast"}, "duration": 3000, "watched": 900,
        })
        assert response.status_code == 400


class TestSeasonContinuity:
    async def test_noise_episode_kept_when_sibling_is_acceptable(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        a = await authed_client.put(f"/users/{uid}/progress/1438", json=_episode("s1", "e1", 500))
        assert a.json()["id"]

        b = await authed_client.put(f"/users/{uid}/progress/1438", json=_episode("s1", "e2", 5))
        assert b.json()["id"]
        assert len((await authed_client.get(f"/users/{uid}/progress")).json()) == 2

    async def test_noise_episode_dropped_when_season_has_no_signal(
        self, authed_client: AsyncClient, user
    ):
        uid = user["user"]["id"]
        # Seed a not-started sibling directly; import skips the save filter.
        await authed_client.put(f"/users/{uid}/progress/import", json=[
            {**_episode("s1", "e1", 5), "tmdbId": "1438"},
        ])
        b = await authed_client.put(f"/users/{uid}/progress/1438", json=_episode("s1", "e2", 5))
        assert b.json()["id"] == ""
        assert len((await authed_client.get(f"/users/{uid}/progress")).json()) == 1

    async def test_noise_episode_without_season_is_dropped(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        body = {"meta": SHOW, "duration": 1000, "watched": 5, "episodeId": "e1"}
        response = await authed_client.put(f"/users/{uid}/progress/1438", json=body)
        assert response.json()["id"] == ""

    async def test_other_season_signal_does_not_count(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/1438", json=_episode("s1", "e1", 500))
        response = await authed_client.put(f"/users/{uid}/progress/1438", json=_episode("s2", "e1", 5))
        assert response.json()["id"] == ""


class TestImport:
    async def test_import_never_regresses_watched(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 1000, "watched": 100,
        })

        lower = await authed_client.put(f"/users/{uid}/progress/import", json=[
            {"meta": MOVIE, "tmdbId": "949", "duration": 1000, "watched": 50},
        ])
        assert lower.status_code == 200
        assert lower.json() == []
        assert (await authed_client.get(f"/users/{uid}/progress")).json()[0]["watched"] == 100

        higher = await authed_client.put(f"/users/{uid}/progress/import", json=[
            {"meta": MOVIE, "tmdbId": "949", "duration": 1000, "watched": 200},
        ])
        assert [i["watched"] for i in higher.json()] == [200]
        listed = (await authed_client.get(f"/users/{uid}/progress")).json()
        assert len(listed) == 1
        assert listed[0]["watched"] == 200

    async def test_import_inserts_new_items_without_filtering(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/import", json=[
            {"meta": MOVIE, "tmdbId": "1", "duration": 1000, "watched": 5},
            {**_episode("s1", "e1", 999), "tmdbId": "2"},
        ])
        assert response.status_code == 200
        items = response.json()
        assert len(items) == 2
        episode = next(i for i in items if i["tmdbId"] == "2")
        assert episode["season"] == {"id": "s1", "number": 1}
        assert episode["episode"] == {"id": "e1", "number": 1}

    async def test_import_leaves_unmatched_rows_alone(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600,
        })
        await authed_client.put(f"/users/{uid}/progress/import", json=[
            {"meta": MOVIE, "tmdbId": "100", "duration": 6000, "watched": 700},
        ])
        listed = {i["tmdbId"]: i["watched"] for i in (await authed_client.get(f"/users/{uid}/progress")).json()}
        assert listed == {"949": 600, "100": 700}

    async def test_import_requires_a_list(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/progress/import", json={"meta": MOVIE})
        assert response.status_code == 400


class TestDeleteAndCleanup:
    async def test_delete_narrowed_by_episode(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/import", json=[
            {**_episode("s1", "e1", 500), "tmdbId": "1438"},
            {**_episode("s1", "e2", 500), "tmdbId": "1438"},
        ])
        response = await authed_client.request(
            "DELETE", f"/users/{uid}/progress/1438", json={"seasonId": "s1", "episodeId": "e2"}
        )
        assert response.json() == {"count": 1, "tmdbId": "1438", "episodeId": "e2", "seasonId": "s1"}
        assert len((await authed_client.get(f"/users/{uid}/progress")).json()) == 1

    async def test_delete_movie_without_body(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600,
        })
        response = await authed_client.delete(f"/users/{uid}/progress/949")
        assert response.status_code == 200
        assert response.json()["count"] == 1

    async def test_delete_with_movie_meta_targets_movie_row(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600,
        })
        response = await authed_client.request(
            "DELETE", f"/users/{uid}/progress/949", json={"meta": MOVIE}
        )
        assert response.json()["count"] == 1

    async def test_cleanup_is_idempotent(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/progress/import", json=[
            {"meta": MOVIE, "tmdbId": "1", "duration": 1000, "watched": 5},
            {**_episode("s1", "e1", 500), "tmdbId": "2"},
            {**_episode("s1", "e2", 5), "tmdbId": "2"},
            {**_episode("s2", "e1", 5), "tmdbId": "2"},
            {**_episode("s2", "e2", 999), "tmdbId": "2"},
        ])

        first = await authed_client.delete(f"/users/{uid}/progress/cleanup")
        assert first.status_code == 200
        assert first.json() == {"deletedCount": 4, "message": "Cleaned up 4 items"}

        second = await authed_client.delete(f"/users/{uid}/progress/cleanup")
        assert second.json()["deletedCount"] == 0

        remaining = (await authed_client.get(f"/users/{uid}/progress")).json()
        assert [(i["tmdbId"], i["episode"]["id"]) for i in remaining] == [("2", "e1")]


class TestOwnership:
    async def test_other_users_progress_is_forbidden(self, authed_client: AsyncClient, register):
        other = await register()
        other_id = other["user"]["id"]
        assert (await authed_client.get(f"/users/{other_id}/progress")).status_code == 403
        put = await authed_client.put(f"/users/{other_id}/progress/949", json={
            "meta": MOVIE, "duration": 6000, "watched": 600,
        })
        assert put.status_code == 403
        assert put.json()["detail"] == "Cannot access other user information"

    async def test_forbidden_even_with_invalid_payload(self, authed_client: AsyncClient, register):
        other = await register()
        response = await authed_client.put(f"/users/{other['user']['id']}/progress/949", json={"bogus": True})
        assert response.status_code == 403

    async def test_forbidden_even_with_malformed_json(self, authed_client: AsyncClient, register):
        other_id = (await register())["user"]["id"]
        response = await authed_client.put(
            f"/users/{other_id}/progress/1",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 403
        assert response.json() == {"detail": "Cannot access other user information"}

    async def test_malformed_json_on_own_path_is_400(self, authed_client: AsyncClient, user):
        response = await authed_client.put(
            f"/users/{user['user']['id']}/progress/1",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["type"] == "json_invalid"

    async def test_malformed_json_without_token_is_401(self, client: AsyncClient, user):
        response = await client.put(
            f"/users/{user['user']['id']}/progress/1",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 401

    async def test_import_and_cleanup_are_owner_only(self, authed_client: AsyncClient, register):
        other_id = (await register())["user"]["id"]
        assert (await authed_client.put(f"/users/{other_id}/progress/import", json=[])).status_code == 403
        assert (await authed_client.delete(f"/users/{other_id}/progress/cleanup")).status_code == 403

    async def test_unauthenticated_is_401(self, client: AsyncClient, user):
        response = await client.get(f"/users/{user['user']['id']}/progress")
        assert response.status_code == 401
