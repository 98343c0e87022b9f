"""Error taxonomy for photo publishing."""


class PublishError(Exception):
    """Base class for every publishing failure."""


class ConfigError(PublishError):
    """Missing or empty API credentials."""


class PhotoError(PublishError):
    """Unreadable, unsupported or undersized photo."""


class MetadataError(PublishError):
    """Missing, invalid or unparseable pose or capture time."""


class RemoteResponseError(PublishError):
    """Malformed or unexpected JSON returned by the provider."""


class TransportError(PublishError):
    """Network or HTTP failure reported by the gateway."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SessionStateError(PublishError):
    """Operation attempted on a session that has already finished."""
