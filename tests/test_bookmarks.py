"""
Bookmark endpoint tests — toggle flip semantics, self-scoped reads and
the error paths of the bookmark routes.
"""
import pytest
from httpx import AsyncClient

from newsroom.auth.tokens import Role


async def _article(client: AsyncClient, make_user, suffix: str) -> int:
    _, headers = await make_user(f"bm_desk_{suffix}", Role.PUBLISHER)
    resp = await client.post(
        "/api/v1/articles", json={"title": f"Bookmarkable {suffix}", "content": "Body"}, headers=headers
    )
    assert resp.status_code == 201
    return resp.json()["id"]


# ---------------------------------------------------------------------------
# Toggle
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_toggle_twice_flips_then_flips_back(async_client: AsyncClient, make_user):
    article_id = await _article(async_client, make_user, "twice")
    _, headers = await make_user("flipper")

    first = await async_client.post(f"/api/v1/bookmarks/{article_id}", headers=headers)
    assert first.status_code == 200
    assert first.json() == {"bookmarked": True}

    second = await async_client.post(f"/api/v1/bookmarks/{article_id}", headers=headers)
    assert second.status_code == 200
    assert second.json() == {"bookmarked": False}


@pytest.mark.asyncio
async def test_odd_number_of_toggles_inverts_state(async_client: AsyncClient, make_user):
    article_id = await _article(async_client, make_user, "odd")
    _, headers = await make_user("oddflipper")

    states = []
    for _ in range(5):
        resp = await async_client.post(f"/api/v1/bookmarks/{article_id}", headers=headers)
        states.append(resp.json()["bookmarked"])
    assert states == [True, False, True, False, True]

    check = await async_client.get(f"/api/v1/bookmarks/check/{article_id}", headers=headers)
    assert check.json() == {"bookmarked": True}


@pytest.mark.asyncio
async def test_toggle_is_scoped_to_caller(async_client: AsyncClient, make_user):
    article_id = await _article(async_client, make_user, "scoped")
    _, alice = await make_user("alice")
    _, bob = await make_user("bob")

    await async_client.post(f"/api/v1/bookmarks/{article_id}", headers=alice)
    resp = await async_client.post(f"/api/v1/bookmarks/{article_id}", headers=bob)
    assert resp.json() == {"bookmarked": True}

    assert (await async_client.get(f"/api/v1/bookmarks/check/{article_id}", headers=alice)).json() == {
        "bookmarked": True
    }


@pytest.mark.asyncio
async def test_toggle_missing_article_is_404(async_client: AsyncClient, make_user):
    _, headers = await make_user("nowhere")
    resp = await async_client.post("/api/v1/bookmarks/99999", headers=headers)
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"


@pytest.mark.asyncio
async def test_toggle_requires_token(async_client: AsyncClient, make_user):
    article_id = await _article(async_client, make_user, "anon")
    resp = await async_client.post(f"/api/v1/bookmarks/{article_id}")
    assert resp.status_code == 401
    assert resp.json()["error"] == "MissingToken"


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_check_unbookmarked_article(async_client: AsyncClient, make_user):
    article_id = await _article(async_client, make_user, "check")
    _, headers = await make_user("checker")
    resp = await async_client.get(f"/api/v1/bookmarks/check/{article_id}", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"bookmarked": False}


@pytest.mark.asyncio
async def test_list_bookmarks_returns_only_callers_newest_first(async_client: AsyncClient, make_user):
    older = await _article(async_client, make_user, "older")
    newer = await _article(async_client, make_user, "newer")
    _, reader = await make_user("collector")
    _, other = await make_user("stranger")

    await async_client.post(f"/api/v1/bookmarks/{older}", headers=reader)
    await async_client.post(f"/api/v1/bookmarks/{newer}", headers=reader)
    await async_client.post(f"/api/v1/bookmarks/{older}", headers=other)

    resp = await async_client.get("/api/v1/bookmarks", headers=reader)
    assert resp.status_code == 200
    items = resp.json()
    assert [b["article_id"] for b in items] == [newer, older]
    assert items[0]["article"]["title"] == "Bookmarkable newer"
    assert items[0]["article"]["author_name"] == "bm_desk_newer"


@pytest.mark.asyncio
async def test_list_bookmarks_requires_token(async_client: AsyncClient):
    resp = await async_client.get("/api/v1/bookmarks")
    assert resp.status_code == 401
