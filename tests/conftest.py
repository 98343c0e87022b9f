"""Shared test fixtures."""

from dataclasses import dataclass, field
from pathlib import Path

import pytest
from PIL import Image

from streetview_publish.adapters.publish_client import PublishGateway
from streetview_publish.config import Settings
from streetview_publish.domain.errors import TransportError
from streetview_publish.domain.uploads import PoseMetadata

VALID_CONFIG = {"api_key": "K", "access_token": "T"}
VALID_METADATA = {"latitude": 21.2, "longitude": -73.4, "created": 1000000000}


@dataclass
class FakePublishGateway(PublishGateway):
    """Fake gateway that records calls and returns canned payloads."""

    start_payload: object = field(
        default_factory=lambda: {"uploadUrl": "https://up/x"}
    )
    record_payload: object = field(
        default_factory=lambda: {"photoId": {"id": "ABC123"}}
    )
    fail_on: str | None = None
    calls: list[str] = field(default_factory=list)
    uploads: list[tuple[str, str, bytes]] = field(default_factory=list)
    records: list[tuple[str, str, PoseMetadata]] = field(default_factory=list)

    async def start_upload(self, api_key: str, access_token: str) -> object:
        self.calls.append("start_upload")
        self._maybe_fail("start_upload")
        return self.start_payload

    async def upload_bytes(
        self, endpoint: str, access_token: str, content: bytes
    ) -> None:
        self.calls.append("upload_bytes")
        self._maybe_fail("upload_bytes")
        self.uploads.append((endpoint, access_token, content))

    async def create_record(
        self, endpoint: str, access_token: str, pose: PoseMetadata
    ) -> object:
        self.calls.append("create_record")
        self._maybe_fail("create_record")
        self.records.append((endpoint, access_token, pose))
        return self.record_payload

    def _maybe_fail(self, action: str) -> None:
        if self.fail_on == action:
            raise TransportError(f"{action} timed out")


def write_image(path: Path, size: tuple[int, int], image_format: str = "PNG") -> Path:
    Image.new("L", size).save(path, format=image_format)
    return path


@pytest.fixture
def settings() -> Settings:
    return Settings(
        streetview_api_key="api-key",
        streetview_access_token="access-token",
        streetview_base_url="https://api.test/v1",
    )


@pytest.fixture
def gateway() -> FakePublishGateway:
    return FakePublishGateway()


@pytest.fixture
def panorama_png(tmp_path: Path) -> Path:
    return write_image(tmp_path / "panorama.png", (5000, 2500))


@pytest.fixture
def panorama_jpeg(tmp_path: Path) -> Path:
    return write_image(tmp_path / "panorama.jpg", (4096, 2048), "JPEG")


@pytest.fixture
def small_png(tmp_path: Path) -> Path:
    return write_image(tmp_path / "small.png", (4095, 2048))
