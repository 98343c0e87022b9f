"""Session state machine for the two-phase photo upload."""

import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from streetview_publish.adapters.publish_client import PublishGateway
from streetview_publish.domain.errors import (
    ConfigError,
    MetadataError,
    PhotoError,
    PublishError,
    RemoteResponseError,
    SessionStateError,
)
from streetview_publish.domain.uploads import (
    Configuration,
    CreatePhotoResponse,
    PhotoRecordResult,
    PhotoSource,
    PoseMetadata,
    StartUploadResponse,
    UploadEndpoint,
    UploadState,
)
from streetview_publish.services.validation import (
    validate_config,
    validate_metadata,
    validate_photo_source,
)

_logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class UploadSession:
    """Drives StartUpload, BytesUpload and CreateRecord strictly in order.

    The session owns the accepted configuration, photo, metadata and the
    bound upload endpoint. State only moves forward; once an endpoint is
    bound it is never re-requested, and a finished session rejects further
    calls. Not safe for concurrent use.
    """

    def __init__(self, gateway: PublishGateway) -> None:
        self._gateway = gateway
        self._state = UploadState.NEW
        self._config: Configuration | None = None
        self._photo: PhotoSource | None = None
        self._pose: PoseMetadata | None = None
        self._endpoint: UploadEndpoint | None = None
        self._result: PhotoRecordResult | None = None

    @property
    def state(self) -> UploadState:
        return self._state

    @property
    def photo(self) -> PhotoSource | None:
        return self._photo

    @property
    def pose(self) -> PoseMetadata | None:
        return self._pose

    @property
    def endpoint(self) -> UploadEndpoint | None:
        return self._endpoint

    @property
    def photo_id(self) -> str | None:
        return self._result.photo_id if self._result else None

    async def configure(self, config: Mapping[str, object] | None) -> UploadEndpoint:
        """Accept credentials and bind an upload endpoint, once per session."""
        self._ensure_active()
        if self._config is not None:
            if validate_config(config) != self._config:
                raise ConfigError("Configuration cannot change once accepted.")
            if self._endpoint is not None:
                return self._endpoint

        try:
            self._config = validate_config(config)
        except ConfigError:
            self._fail("invalid configuration")
            raise
        self._transition(UploadState.CONFIGURED)

        try:
            payload = await self._gateway.start_upload(
                self._config.api_key, self._config.access_token
            )
            endpoint = _parse(StartUploadResponse, payload, "startUpload").upload_url
        except PublishError:
            self._fail("start upload failed")
            raise

        self._endpoint = endpoint
        self._transition(UploadState.ENDPOINT_ACQUIRED)
        return endpoint

    def set_photo(self, path: str | os.PathLike[str]) -> PhotoSource:
        """Validate and select the photo to upload."""
        self._ensure_active()
        photo = validate_photo_source(path)
        self._photo = photo
        _logger.info(
            "Photo selected: %s (%sx%s, %s)",
            Path(photo.path).name,
            photo.width,
            photo.height,
            photo.mime_type,
        )
        return photo

    def set_metadata(self, data: Mapping[str, object] | None) -> PoseMetadata:
        """Validate and store pose metadata."""
        self._ensure_active()
        pose = validate_metadata(data)
        self._pose = pose
        return pose

    async def execute(self) -> str:
        """Upload the photo bytes, create the record and return the photo id."""
        self._ensure_active()
        config, photo, pose, endpoint = self._require_ready()
        content = _read_photo(photo)

        try:
            await self._gateway.upload_bytes(endpoint, config.access_token, content)
            self._transition(UploadState.BYTES_SENT)
            payload = await self._gateway.create_record(
                endpoint, config.access_token, pose
            )
            response = _parse(CreatePhotoResponse, payload, "createRecord")
        except PublishError:
            self._fail("upload failed")
            raise

        self._result = PhotoRecordResult(photo_id=response.photo_id.id)
        self._transition(UploadState.RECORD_CREATED)
        _logger.info("Photo record created: photo_id=%s", self._result.photo_id)
        return self._result.photo_id

    def _require_ready(
        self,
    ) -> tuple[Configuration, PhotoSource, PoseMetadata, UploadEndpoint]:
        if self._config is None:
            raise ConfigError("Configuration cannot be empty.")
        if self._photo is None:
            raise PhotoError("Photo cannot be missing.")
        if self._pose is None:
            raise MetadataError("Photo metadata cannot be empty.")
        if self._endpoint is None:
            raise ConfigError("Upload URL reference cannot be empty or broken.")
        return self._config, self._photo, self._pose, self._endpoint

    def _ensure_active(self) -> None:
        if self._state is UploadState.RECORD_CREATED:
            raise SessionStateError(
                f"Session already published photo {self.photo_id}."
            )
        if self._state is UploadState.FAILED:
            raise SessionStateError("Session has failed; start a new one.")

    def _transition(self, state: UploadState) -> None:
        _logger.info("Upload session %s -> %s", self._state.value, state.value)
        self._state = state

    def _fail(self, reason: str) -> None:
        _logger.warning(
            "Upload session failed in state %s: %s", self._state.value, reason
        )
        self._state = UploadState.FAILED


def _parse(model: type[ModelT], payload: object, action: str) -> ModelT:
    """Validate a raw gateway payload, mapping schema errors to RemoteResponseError."""
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise RemoteResponseError(f"Unexpected {action} response: {exc}") from exc


def _read_photo(photo: PhotoSource) -> bytes:
    try:
        return Path(photo.path).read_bytes()
    except OSError as exc:
        raise PhotoError("Photo does not exist or is not readable.") from exc
