"""
Gate tests — the authenticated gate and the role gate, exercised over
HTTP so header parsing, status mapping and error bodies are covered
together.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient

from newsroom.auth.tokens import Principal, Role, TokenCodec

ARTICLE = {"title": "Gate test", "content": "Body", "category": "Technology"}


# ---------------------------------------------------------------------------
# Unauthenticated -> TokenPresent
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_missing_header_is_missing_token(async_client: AsyncClient):
    resp = await async_client.post("/api/v1/articles", json=ARTICLE)
    assert resp.status_code == 401
    assert resp.json()["error"] == "MissingToken"
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
@pytest.mark.parametrize("header", ["Token abc", "Basic dXNlcjpwYXNz", "Bearer", "abc"])
async def test_malformed_header_is_missing_token(async_client: AsyncClient, header: str):
    resp = await async_client.get("/api/v1/bookmarks", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.json()["error"] == "MissingToken"


# ---------------------------------------------------------------------------
# TokenPresent -> Verified
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_foreign_token_is_invalid_signature(async_client: AsyncClient):
    foreign = TokenCodec(secret_key="not-the-server-key-0123456789abcdef")
    token = foreign.issue(Principal(id=1, role=Role.PUBLISHER))
    resp = await async_client.get("/api/v1/bookmarks", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "InvalidSignature"


@pytest.mark.asyncio
async def test_expired_token_is_expired(async_client: AsyncClient, codec: TokenCodec):
    token = codec.issue(Principal(id=1, role=Role.READER), ttl=timedelta(seconds=-5))
    resp = await async_client.get("/api/v1/bookmarks", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Expired"


@pytest.mark.asyncio
async def test_lowercase_bearer_scheme_is_accepted(async_client: AsyncClient, make_user):
    user_id, headers = await make_user("lowercase")
    token = headers["Authorization"].split(" ", 1)[1]
    resp = await async_client.get("/api/v1/users/me", headers={"Authorization": f"bearer {token}"})
    assert resp.status_code == 200
    assert resp.json()["id"] == user_id


@pytest.mark.asyncio
async def test_verified_principal_reaches_handler(async_client: AsyncClient, make_user):
    user_id, headers = await make_user("whoami", Role.PUBLISHER)
    resp = await async_client.get("/api/v1/users/me", headers=headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == user_id
    assert body["role"] == "publisher"


# ---------------------------------------------------------------------------
# Verified -> RoleChecked
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_reader_cannot_create_article(async_client: AsyncClient, make_user):
    _, headers = await make_user("plainreader")
    resp = await async_client.post("/api/v1/articles", json=ARTICLE, headers=headers)
    assert resp.status_code == 403
    assert resp.json()["error"] == "InsufficientRole"


@pytest.mark.asyncio
async def test_publisher_passes_role_gate(async_client: AsyncClient, make_user):
    user_id, headers = await make_user("gatepublisher", Role.PUBLISHER)
    resp = await async_client.post("/api/v1/articles", json=ARTICLE, headers=headers)
    assert resp.status_code == 201
    assert resp.json()["author_id"] == user_id


@pytest.mark.asyncio
async def test_role_gate_runs_after_authentication(async_client: AsyncClient, codec: TokenCodec):
    """An expired publisher token fails authentication before the role check."""
    token = codec.issue(Principal(id=1, role=Role.PUBLISHER), ttl=timedelta(seconds=-1))
    resp = await async_client.post(
        "/api/v1/articles", json=ARTICLE, headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401
    assert resp.json()["error"] == "Expired"


@pytest.mark.asyncio
async def test_rejections_do_not_leak_internals(async_client: AsyncClient):
    resp = await async_client.delete("/api/v1/articles/1", headers={"Authorization": "Bearer x.y.z"})
    assert resp.status_code == 401
    assert set(resp.json()) == {"error", "message"}
