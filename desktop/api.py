"""Async HTTP client for the portal REST API."""

from __future__ import annotations

import httpx
import structlog

logger = structlog.get_logger()


class DesktopApiClient:
    """Thin wrapper over ``httpx.AsyncClient``; every call raises on non-2xx.

    ``transport`` lets tests drive the FastAPI app in-process with
    ``httpx.ASGITransport``.
    """

    def __init__(
        self,
        base_url: str,
        session_token: str | None = None,
        cookie_name: str = "session",
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ):
        cookies = {cookie_name: session_token} if session_token else None
        self.base_url = base_url
        self._client = httpx.AsyncClient(
            base_url=base_url,
            transport=transport,
            cookies=cookies,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> DesktopApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        resp = await self._client.request(method, url, **kwargs)
        resp.raise_for_status()
        return resp

    # --------------- Account ---------------

    async def current_user(self) -> dict:
        return (await self._request("GET", "/api/auth/user")).json()

    async def logout(self) -> None:
        """Hit the logout redirect and drop the local session cookie."""
        resp = await self._client.get("/api/logout")
        if not resp.is_redirect:
            resp.raise_for_status()
        self._client.cookies.clear()

    # --------------- Files ---------------

    async def list_files(self) -> list[dict]:
        return (await self._request("GET", "/api/files")).json()["files"]

    async def list_deleted_files(self) -> list[dict]:
        return (await self._request("GET", "/api/files/deleted")).json()["files"]

    async def get_file(self, file_id: str) -> dict:
        return (await self._request("GET", f"/api/files/{file_id}")).json()

    async def get_content(self, file_id: str) -> bytes:
        return (await self._request("GET", f"/api/files/{file_id}/content")).content

    async def upload(self, files: list[tuple[str, bytes]]) -> list[dict]:
        parts = [("files", (name, data)) for name, data in files]
        resp = await self._request("POST", "/api/files/upload", files=parts)
        return resp.json()["files"]

    async def update_file(self, file_id: str, **changes) -> dict:
        return (await self._request("PATCH", f"/api/files/{file_id}", json=changes)).json()

    async def delete_file(self, file_id: str) -> None:
        await self._request("DELETE", f"/api/files/{file_id}")

    async def restore_file(self, file_id: str) -> None:
        await self._request("POST", f"/api/files/{file_id}/restore")

    async def permanent_delete(self, file_id: str) -> None:
        await self._request("DELETE", f"/api/files/{file_id}/permanent")

    async def empty_trash(self) -> int:
        return (await self._request("DELETE", "/api/files/trash/empty")).json()["removed"]

    async def share_file(self, file_id: str) -> dict:
        return (await self._request("POST", f"/api/files/{file_id}/share")).json()

    # --------------- Sharing ---------------

    async def get_shared(self, token: str) -> dict:
        return (await self._request("GET", f"/api/share/{token}")).json()

    async def add_shared(self, token: str) -> dict:
        return (await self._request("POST", f"/api/share/{token}/add")).json()

    # --------------- Settings ---------------

    async def get_settings(self) -> dict:
        return (await self._request("GET", "/api/settings")).json()

    async def update_settings(self, **changes) -> dict:
        return (await self._request("PATCH", "/api/settings", json=changes)).json()
