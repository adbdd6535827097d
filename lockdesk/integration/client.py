"""HTTP client for the lockable resources endpoints of the server."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

import httpx

from lockdesk.core.config import ServerSettings
from lockdesk.resources.model import Resource
from lockdesk.utils.errors import ActionSubmissionError, IntegrationError
from lockdesk.utils.logging import get_logger

from .dispatcher import ActionRequest, encode_component

logger = get_logger(__name__)


@dataclass(frozen=True)
class Crumb:
    """Anti-forgery token issued by the server."""

    field: str
    value: str


class LockableResourcesClient:
    """Talk to ``<base_url>/<root_path>`` on behalf of the UI.

    The client implements the action transport used by
    :class:`~lockdesk.integration.dispatcher.ActionDispatcher` and the note
    form fetcher used by :class:`~lockdesk.ui_tui.notes.NoteEditor`. Every POST
    carries the crumb field, fetched once from the crumb issuer and reused for
    the lifetime of the client.
    """

    def __init__(
        self,
        settings: ServerSettings,
        *,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        self._client = client or self._build_client(settings)
        self._crumb: Optional[Crumb] = None
        self._crumb_loaded = False
        self._lock = asyncio.Lock()

    @staticmethod
    def _build_client(settings: ServerSettings) -> httpx.AsyncClient:
        auth = None
        if settings.username and settings.api_token:
            auth = httpx.BasicAuth(settings.username, settings.api_token)
        return httpx.AsyncClient(
            base_url=settings.base_url,
            auth=auth,
            timeout=settings.timeout,
            verify=settings.verify_tls,
            follow_redirects=True,
        )

    def _url(self, path: str) -> str:
        root = self._settings.root_path.strip("/")
        return f"/{root}/{path}" if root else f"/{path}"

    async def crumb(self) -> Optional[Crumb]:
        """Return the crumb, or ``None`` when the server has CSRF protection off."""

        async with self._lock:
            if self._crumb_loaded:
                return self._crumb
            try:
                response = await self._client.get("/" + self._settings.crumb_path.lstrip("/"))
            except httpx.HTTPError as exc:
                raise IntegrationError(f"crumb request failed: {exc}") from exc
            if response.status_code == 404:
                logger.debug("server issues no crumb")
                self._crumb = None
            else:
                if response.is_error:
                    raise IntegrationError(f"crumb request failed with HTTP {response.status_code}")
                try:
                    payload = response.json()
                    self._crumb = Crumb(field=payload["crumbRequestField"], value=payload["crumb"])
                except (ValueError, KeyError, TypeError) as exc:
                    raise IntegrationError(f"crumb issuer returned an unusable answer: {exc!r}") from exc
            self._crumb_loaded = True
            return self._crumb

    async def _form(self, fields: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
        form = dict(fields or {})
        crumb = await self.crumb()
        if crumb is not None:
            form[crumb.field] = crumb.value
        return form

    async def submit(self, request: ActionRequest) -> None:
        """POST ``request`` to its action endpoint.

        The server answers with a redirect to the resources page; the body is
        not inspected.
        """

        action = request.action.endpoint
        form = await self._form()
        try:
            response = await self._client.post(self._url(request.path), data=form)
        except httpx.HTTPError as exc:
            raise ActionSubmissionError(action, str(exc)) from exc
        logger.debug(
            "action submitted",
            extra={"action": action, "path": request.path, "status": response.status_code},
        )
        if response.is_error:
            raise ActionSubmissionError(
                action,
                response.text.strip() or response.reason_phrase,
                status_code=response.status_code,
            )

    async def fetch_note_form(self, resource_name: str) -> str:
        """Return the HTML fragment of the note editor for ``resource_name``."""

        try:
            response = await self._client.get(self._url("noteForm"), params={"resource": resource_name})
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise IntegrationError(f"note form for {resource_name} unavailable: {exc}") from exc
        return response.text

    async def save_note(self, resource_name: str, note: str) -> None:
        path = f"saveNote?resource={encode_component(resource_name)}"
        form = await self._form({"note": note})
        try:
            response = await self._client.post(self._url(path), data=form)
        except httpx.HTTPError as exc:
            raise ActionSubmissionError("saveNote", str(exc)) from exc
        if response.is_error:
            raise ActionSubmissionError(
                "saveNote",
                response.text.strip() or response.reason_phrase,
                status_code=response.status_code,
            )
        logger.info("note saved", extra={"resource": resource_name})

    async def list_resources(self, current_user: Optional[str] = None) -> List[Resource]:
        """Fetch the resource table from ``api/json``."""

        try:
            response = await self._client.get(self._url("api/json"))
            response.raise_for_status()
            payload: Dict[str, Any] = response.json()
        except httpx.HTTPError as exc:
            raise IntegrationError(f"resource listing failed: {exc}") from exc
        except ValueError as exc:
            raise IntegrationError("resource listing is not valid JSON") from exc
        return [Resource.from_api(entry, current_user) for entry in payload.get("resources", [])]

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "LockableResourcesClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


__all__ = ["Crumb", "LockableResourcesClient"]
