"""Integration tests for /users/{id}/watch-history."""

from datetime import datetime

from httpx import AsyncClient

from mwb.progress.rules import MIN_EPOCH

SHOW = {"title": "The Wire", "year": 2002, "type": "show"}
MOVIE = {"title": "Heat", "year": 1995, "type": "movie"}


def _event(watched_at: str, **extra) -> dict:
    return {"meta": SHOW, "duration": 3600, "watched": 3500, "watchedAt": watched_at, **extra}


class TestRecordWatch:
    async def test_put_records_event(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(
            f"/users/{uid}/watch-history/1438",
            json=_event("2024-03-01T20:00:00Z", completed=True, seasonId="s1", episodeId="e1", seasonNumber=1),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["id"]
        assert data["tmdbId"] == "1438"
        assert data["seasonId"] == "s1"
        assert data["episodeId"] == "e1"
        assert data["completed"] is True
        assert datetime.fromisoformat(data["watchedAt"]) == datetime.fromisoformat("2024-03-01T20:00:00+00:00")

    async def test_noise_is_still_recorded(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(
            f"/users/{uid}/watch-history/949",
            json={"meta": MOVIE, "duration": 6000, "watched": 3, "watchedAt": "2024-03-01T20:00:00Z"},
        )
        assert response.json()["id"]
        assert len((await authed_client.get(f"/users/{uid}/watch-history")).json()) == 1

    async def test_second_put_overwrites_same_key(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        url = f"/users/{uid}/watch-history/1438"
        first = await authed_client.put(url, json=_event("2024-03-01T20:00:00Z", seasonId="s1", episodeId="e1"))
        second = await authed_client.put(
            url, json=_event("2024-03-02T20:00:00Z", seasonId="s1", episodeId="e1", completed=True)
        )
        assert first.json()["id"] == second.json()["id"]
        listed = (await authed_client.get(f"/users/{uid}/watch-history")).json()
        assert len(listed) == 1
        assert listed[0]["completed"] is True

    async def test_watched_at_is_clamped(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(f"/users/{uid}/watch-history/1438", json=_event("1999-12-31T00:00:00Z"))
        assert datetime.fromisoformat(response.json()["watchedAt"]) == MIN_EPOCH

    async def test_watched_at_is_required(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.put(
            f"/users/{uid}/watch-history/1438", json={"meta": SHOW, "duration": 1, "watched": 1}
        )
        assert response.status_code == 400


class TestListAndDelete:
    async def test_list_is_newest_watch_first(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        await authed_client.put(f"/users/{uid}/watch-history/1", json=_event("2024-01-01T00:00:00Z"))
        await authed_client.put(f"/users/{uid}/watch-history/2", json=_event("2024-06-01T00:00:00Z"))
        await authed_client.put(f"/users/{uid}/watch-history/3", json=_event("2024-03-01T00:00:00Z"))

        listed = (await authed_client.get(f"/users/{uid}/watch-history")).json()
        assert [i["tmdbId"] for i in listed] == ["2", "3", "1"]
        assert listed[0]["season"] == {"id": None, "number": None}

    async def test_delete_with_filters(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        url = f"/users/{uid}/watch-history/1438"
        await authed_client.put(url, json=_event("2024-01-01T00:00:00Z", seasonId="s1", episodeId="e1"))
        await authed_client.put(url, json=_event("2024-01-02T00:00:00Z", seasonId="s1", episodeId="e2"))
        await authed_client.put(url, json=_event("2024-01-03T00:00:00Z", seasonId="s2", episodeId="e1"))

        response = await authed_client.request("DELETE", url, json={"seasonId": "s1"})
        assert response.json() == {"success": True, "count": 2, "tmdbId": "1438", "episodeId": None, "seasonId": "s1"}

        rest = await authed_client.delete(url)
        assert rest.json()["count"] == 1

    async def test_delete_nothing(self, authed_client: AsyncClient, user):
        uid = user["user"]["id"]
        response = await authed_client.delete(f"/users/{uid}/watch-history/404")
        assert response.json()["count"] == 0


class TestOwnership:
    async def test_other_users_history_is_forbidden(self, authed_client: AsyncClient, register):
        other_id = (await register())["user"]["id"]
        assert (await authed_client.get(f"/users/{other_id}/watch-history")).status_code == 403
        put = await authed_client.put(f"/users/{other_id}/watch-history/1", json=_event("2024-01-01T00:00:00Z"))
        assert put.status_code == 403
        assert (await authed_client.delete(f"/users/{other_id}/watch-history/1")).status_code == 403
