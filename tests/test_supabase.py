import json

import httpx
import pytest

from core.supabase import SupabaseAuth, SupabaseError

SERVICE_KEY = "service-role-key"


def make_client(handler) -> SupabaseAuth:
    return SupabaseAuth(
        base_url="https://project.supabase.co/",
        service_key=SERVICE_KEY,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_get_user_sends_caller_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["auth"] = request.headers["Authorization"]
        seen["apikey"] = request.headers["apikey"]
        return httpx.Response(200, json={"id": "u1", "email": "a@b.edu"})

    client = make_client(handler)
    user = await client.get_user("user-jwt")
    await client.aclose()

    assert user["id"] == "u1"
    assert seen["url"] == "https://project.supabase.co/auth/v1/user"
    assert seen["auth"] == "Bearer user-jwt"
    assert seen["apikey"] == SERVICE_KEY


@pytest.mark.asyncio
async def test_get_user_rejected_token_raises_with_status():
    client = make_client(lambda request: httpx.Response(401, json={"msg": "invalid JWT"}))
    with pytest.raises(SupabaseError) as excinfo:
        await client.get_user("expired")
    assert excinfo.value.status_code == 401
    assert excinfo.value.is_client_error
    assert "invalid JWT" in str(excinfo.value)


@pytest.mark.asyncio
async def test_get_user_empty_token_never_calls_provider():
    def handler(request):
        raise AssertionError("provider must not be called")

    with pytest.raises(SupabaseError):
        await make_client(handler).get_user("  ")


@pytest.mark.asyncio
async def test_transport_failure_is_supabase_error():
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    with pytest.raises(SupabaseError) as excinfo:
        await make_client(handler).get_user("t")
    assert excinfo.value.status_code is None
    assert not excinfo.value.is_client_error


@pytest.mark.asyncio
async def test_list_users_follows_pages():
    pages = {
        "1": [{"id": "u1", "email": "a@x"}, {"id": "u2", "email": "b@x"}],
        "2": [{"id": "u3", "email": "c@x"}],
    }

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/admin/users"
        assert request.headers["Authorization"] == f"Bearer {SERVICE_KEY}"
        assert request.url.params["per_page"] == "2"
        return httpx.Response(200, json={"users": pages[request.url.params["page"]], "aud": "authenticated"})

    users = await make_client(handler).list_users(per_page=2)
    assert [u["id"] for u in users] == ["u1", "u2", "u3"]


@pytest.mark.asyncio
async def test_list_users_malformed_payload():
    client = make_client(lambda request: httpx.Response(200, json={"oops": True}))
    with pytest.raises(SupabaseError):
        await client.list_users()


@pytest.mark.asyncio
async def test_create_user_posts_confirmed_user_with_metadata():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "new", "email": "n@x.edu"})

    user = await make_client(handler).create_user(
        email="n@x.edu",
        password="secret1",
        user_metadata={"name": "N", "role": "parent"},
    )
    assert user["id"] == "new"
    assert seen["method"] == "POST"
    assert seen["body"] == {
        "email": "n@x.edu",
        "password": "secret1",
        "email_confirm": True,
        "user_metadata": {"name": "N", "role": "parent"},
    }


@pytest.mark.asyncio
async def test_create_user_unwraps_user_envelope():
    client = make_client(lambda request: httpx.Response(200, json={"user": {"id": "w", "email": "w@x"}}))
    user = await client.create_user(email="w@x", password="secret1")
    assert user["id"] == "w"


@pytest.mark.asyncio
async def test_create_user_provider_rejection_keeps_message():
    client = make_client(
        lambda request: httpx.Response(422, json={"msg": "Unable to validate email address: invalid format"})
    )
    with pytest.raises(SupabaseError) as excinfo:
        await client.create_user(email="bad", password="secret1")
    assert excinfo.value.status_code == 422
    assert "invalid format" in str(excinfo.value)


@pytest.mark.asyncio
async def test_get_user_by_id_uses_admin_path():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/auth/v1/admin/users/u7"
        return httpx.Response(200, json={"id": "u7", "user_metadata": {"name": "Sam"}})

    user = await make_client(handler).get_user_by_id("u7")
    assert user["user_metadata"]["name"] == "Sam"


def test_client_requires_url_and_key():
    with pytest.raises(SupabaseError):
        SupabaseAuth(base_url="", service_key="k")
    with pytest.raises(SupabaseError):
        SupabaseAuth(base_url="https://x.supabase.co", service_key=" ")


@pytest.mark.asyncio
async def test_get_user_rejects_non_ascii_token_without_calling_supabase():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"id": "u1"})

    with pytest.raises(SupabaseError) as excinfo:
        await make_client(handler).get_user("caf\xe9")
    assert excinfo.value.status_code == 401
    assert calls == []


@pytest.mark.asyncio
async def test_unencodable_header_becomes_supabase_error():
    client = make_client(lambda request: httpx.Response(200, json={}))
    with pytest.raises(SupabaseError):
        await client._request("GET", "/user", headers={"Authorization": "Bearer €"})
