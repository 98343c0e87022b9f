"""Domain models for a single photo upload."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

MIN_WIDTH = 4096
MIN_HEIGHT = 2048

UploadEndpoint = str


class UploadState(Enum):
    """Lifecycle phases of an upload session."""

    NEW = "new"
    CONFIGURED = "configured"
    ENDPOINT_ACQUIRED = "endpoint_acquired"
    BYTES_SENT = "bytes_sent"
    RECORD_CREATED = "record_created"
    FAILED = "failed"


@dataclass(frozen=True)
class Configuration:
    """Accepted API credentials."""

    api_key: str
    access_token: str

    def __repr__(self) -> str:
        return "Configuration(api_key=***, access_token=***)"


@dataclass(frozen=True)
class PhotoSource:
    """A local panorama that passed validation."""

    path: str
    mime_type: str
    width: int
    height: int


@dataclass(frozen=True)
class PoseMetadata:
    """Geolocation and capture time attached to a photo record."""

    latitude: float
    longitude: float
    captured_at: int
    heading: float | None = None


@dataclass(frozen=True)
class PhotoRecordResult:
    """Terminal artifact of a successful upload."""

    photo_id: str


class StartUploadResponse(BaseModel):
    """Payload returned by photo:startUpload."""

    model_config = ConfigDict(populate_by_name=True)

    upload_url: str = Field(alias="uploadUrl", min_length=1)


class PhotoIdentifier(BaseModel):
    """Nested photo id object."""

    id: str = Field(min_length=1)


class CreatePhotoResponse(BaseModel):
    """Payload returned when a photo record is created."""

    model_config = ConfigDict(populate_by_name=True)

    photo_id: PhotoIdentifier = Field(alias="photoId")


def photo_request_body(
    endpoint: UploadEndpoint, pose: PoseMetadata
) -> dict[str, object]:
    """Build the JSON body for creating a photo record."""
    pose_body: dict[str, object] = {
        "latLngPair": {
            "latitude": pose.latitude,
            "longitude": pose.longitude,
        }
    }
    if pose.heading is not None:
        pose_body["heading"] = pose.heading
    return {
        "uploadReference": {"uploadUrl": endpoint},
        "pose": pose_body,
        "captureTime": {"seconds": pose.captured_at},
    }
