"""Street View Publish API gateway."""

import logging
from dataclasses import dataclass
from typing import Protocol

import httpx

from streetview_publish.domain.errors import RemoteResponseError, TransportError
from streetview_publish.domain.uploads import (
    PoseMetadata,
    UploadEndpoint,
    photo_request_body,
)

DEFAULT_BASE_URL = "https://streetviewpublish.googleapis.com/v1"

_logger = logging.getLogger(__name__)


class PublishGateway(Protocol):
    """Interface for the three remote publishing calls."""

    async def start_upload(self, api_key: str, access_token: str) -> object:
        """Request a one-time upload endpoint and return the raw JSON payload."""

    async def upload_bytes(
        self, endpoint: UploadEndpoint, access_token: str, content: bytes
    ) -> None:
        """Send raw image bytes to the upload endpoint."""

    async def create_record(
        self, endpoint: UploadEndpoint, access_token: str, pose: PoseMetadata
    ) -> object:
        """Create a photo record and return the raw JSON payload."""


@dataclass
class HttpxPublishGateway(PublishGateway):
    """Publish gateway implemented with httpx."""

    http_client: httpx.AsyncClient
    base_url: str = DEFAULT_BASE_URL
    request_timeout_seconds: float = 15
    upload_timeout_seconds: float = 120

    @classmethod
    def create(
        cls,
        base_url: str = DEFAULT_BASE_URL,
        request_timeout_seconds: float = 15,
        upload_timeout_seconds: float = 120,
    ) -> "HttpxPublishGateway":
        """Create a gateway with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            base_url=base_url.rstrip("/"),
            request_timeout_seconds=request_timeout_seconds,
            upload_timeout_seconds=upload_timeout_seconds,
        )

    async def start_upload(self, api_key: str, access_token: str) -> object:
        """Call photo:startUpload with an empty body."""
        url = f"{self.base_url}/photo:startUpload"
        response = await self._post(
            "startUpload",
            url,
            params={"key": api_key},
            headers={**_auth_headers(access_token), "Content-Length": "0"},
            timeout=self.request_timeout_seconds,
        )
        return _json_body(response, "startUpload")

    async def upload_bytes(
        self, endpoint: UploadEndpoint, access_token: str, content: bytes
    ) -> None:
        """POST the raw image bytes to the upload URL."""
        await self._post(
            "uploadBytes",
            endpoint,
            content=content,
            headers=_auth_headers(access_token),
            timeout=self.upload_timeout_seconds,
        )

    async def create_record(
        self, endpoint: UploadEndpoint, access_token: str, pose: PoseMetadata
    ) -> object:
        """Register the uploaded bytes with pose and capture time."""
        url = f"{self.base_url}/photo"
        response = await self._post(
            "createRecord",
            url,
            json=photo_request_body(endpoint, pose),
            headers=_auth_headers(access_token),
            timeout=self.request_timeout_seconds,
        )
        return _json_body(response, "createRecord")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _post(self, action: str, url: str, **kwargs: object) -> httpx.Response:
        _logger.debug("Publish %s: POST %s", action, _redact(url))
        try:
            response = await self.http_client.post(url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status_code = exc.response.status_code
            _logger.warning("Publish %s failed: status=%s", action, status_code)
            raise TransportError(
                f"{action} returned HTTP {status_code}", status_code=status_code
            ) from exc
        except httpx.HTTPError as exc:
            _logger.warning("Publish %s failed: %s", action, type(exc).__name__)
            raise TransportError(f"{action} failed: {exc}") from exc
        return response


def _auth_headers(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


def _json_body(response: httpx.Response, action: str) -> object:
    try:
        return response.json()
    except ValueError as exc:
        raise RemoteResponseError(f"{action} response is not valid JSON") from exc


def _redact(url: str) -> str:
    """Reduce a URL to its host so keys and upload tokens stay out of logs."""
    return httpx.URL(url).host or "<unknown>"
