"""Tests for the fluent upload entry point."""

import asyncio
from pathlib import Path

import pytest

from streetview_publish.domain.errors import ConfigError, MetadataError, PhotoError
from streetview_publish.domain.uploads import UploadState
from streetview_publish.publisher import StreetViewUpload
from tests.conftest import VALID_CONFIG, VALID_METADATA, FakePublishGateway


def test_fluent_upload_returns_photo_id(
    gateway: FakePublishGateway, panorama_png: Path
) -> None:
    upload = asyncio.run(StreetViewUpload.open(VALID_CONFIG, gateway))

    photo_id = asyncio.run(
        upload.photo(panorama_png).metadata(VALID_METADATA).upload()
    )

    assert photo_id == "ABC123"
    assert upload.photo_id == "ABC123"
    assert upload.state is UploadState.RECORD_CREATED


def test_open_rejects_bad_config(gateway: FakePublishGateway) -> None:
    with pytest.raises(ConfigError, match="API key"):
        asyncio.run(StreetViewUpload.open({"access_token": "T"}, gateway))

    assert gateway.calls == []


def test_upload_before_photo_fails(gateway: FakePublishGateway) -> None:
    upload = asyncio.run(StreetViewUpload.open(VALID_CONFIG, gateway))

    with pytest.raises(PhotoError):
        asyncio.run(upload.metadata(VALID_METADATA).upload())

    assert gateway.calls == ["start_upload"]


def test_upload_before_metadata_fails(
    gateway: FakePublishGateway, panorama_png: Path
) -> None:
    upload = asyncio.run(StreetViewUpload.open(VALID_CONFIG, gateway))

    with pytest.raises(MetadataError):
        asyncio.run(upload.photo(panorama_png).upload())

    assert gateway.calls == ["start_upload"]


def test_photo_rejects_small_image(
    gateway: FakePublishGateway, small_png: Path
) -> None:
    upload = asyncio.run(StreetViewUpload.open(VALID_CONFIG, gateway))

    with pytest.raises(PhotoError):
        upload.photo(small_png)
