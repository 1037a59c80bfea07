"""
Supabase Auth (GoTrue) HTTP client.

Used endpoints:
- GET  /auth/v1/user                  -> user owning the bearer token
- GET  /auth/v1/admin/users           -> {"users": [...]} (paginated)
- POST /auth/v1/admin/users           -> created user
- GET  /auth/v1/admin/users/{id}      -> user

Admin calls authenticate with the service-role key. Users are returned as the
provider's JSON objects (`id`, `email`, `user_metadata`, ...).
"""

from __future__ import annotations

from typing import Any

import httpx

# Provider failures are explicit and separable from other runtime errors.
class SupabaseError(RuntimeError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


def _error_message(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:500]
    if isinstance(data, dict):
        for field in ("msg", "message", "error_description", "error"):
            value = data.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return resp.text[:500]


class SupabaseAuth:
    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        timeout_s: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        base_url = (base_url or "").strip().rstrip("/")
        if not base_url:
            raise SupabaseError("SUPABASE_URL is empty.")
        if not (service_key or "").strip():
            raise SupabaseError("SUPABASE_SERVICE_ROLE_KEY is empty.")

        self._service_key = service_key.strip()
        self._client = httpx.AsyncClient(
            base_url=f"{base_url}/auth/v1",
            timeout=timeout_s,
            transport=transport,
            headers={"apikey": self._service_key},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _admin_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._service_key}"}

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
        except (httpx.HTTPError, UnicodeEncodeError) as exc:
            raise SupabaseError(f"Supabase request failed: {method} {path}: {exc}") from exc

        if resp.status_code >= 400:
            raise SupabaseError(_error_message(resp), status_code=resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            raise SupabaseError(f"Supabase returned invalid JSON for {method} {path}.") from exc

    async def get_user(self, access_token: str) -> dict[str, Any]:
        """
        Resolve a session access token to its user. Raises SupabaseError when
        the token is expired, revoked, malformed, or unknown.
        """
        token = (access_token or "").strip()
        if not token:
            raise SupabaseError("Access token is empty.", status_code=401)
        if not token.isascii():
            raise SupabaseError("Access token is not ASCII.", status_code=401)

        data = await self._request("GET", "/user", headers={"Authorization": f"Bearer {token}"})
        if not isinstance(data, dict) or not data.get("id"):
            raise SupabaseError("Supabase returned no user for token.", status_code=401)
        return data

    async def list_users(self, *, per_page: int = 1000) -> list[dict[str, Any]]:
        """
        Return every user, following pagination until a short page.
        """
        users: list[dict[str, Any]] = []
        page = 1
        while True:
            data = await self._request(
                "GET",
                "/admin/users",
                params={"page": page, "per_page": per_page},
                headers=self._admin_headers(),
            )
            batch = data.get("users") if isinstance(data, dict) else None
            if not isinstance(batch, list):
                raise SupabaseError("Supabase returned a malformed user list.")
            users.extend(u for u in batch if isinstance(u, dict))
            if len(batch) < per_page:
                return users
            page += 1

    async def create_user(
        self,
        *,
        email: str,
        password: str,
        user_metadata: dict[str, Any] | None = None,
        email_confirm: bool = True,
    ) -> dict[str, Any]:
        data = await self._request(
            "POST",
            "/admin/users",
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
            headers=self._admin_headers(),
        )
        # Some GoTrue versions wrap the user in {"user": {...}}.
        if isinstance(data, dict) and isinstance(data.get("user"), dict):
            data = data["user"]
        if not isinstance(data, dict) or not data.get("id"):
            raise SupabaseError("Supabase returned no user after create.")
        return data

    async def get_user_by_id(self, user_id: str) -> dict[str, Any]:
        data = await self._request("GET", f"/admin/users/{user_id}", headers=self._admin_headers())
        if not isinstance(data, dict) or not data.get("id"):
            raise SupabaseError(f"Supabase returned no user for id {user_id}.", status_code=404)
        return data
