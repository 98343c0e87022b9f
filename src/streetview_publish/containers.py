"""Dependency container wiring for the publisher."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from streetview_publish.adapters.publish_client import (
    HttpxPublishGateway,
    PublishGateway,
)
from streetview_publish.config import Settings
from streetview_publish.publisher import StreetViewUpload


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    gateway: PublishGateway
    open_upload: Callable[[], Awaitable[StreetViewUpload]]
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    gateway = HttpxPublishGateway.create(
        base_url=resolved_settings.streetview_base_url,
        request_timeout_seconds=resolved_settings.request_timeout_seconds,
        upload_timeout_seconds=resolved_settings.upload_timeout_seconds,
    )

    async def open_upload() -> StreetViewUpload:
        return await StreetViewUpload.open(resolved_settings.credentials(), gateway)

    async def close_resources() -> None:
        await gateway.close()

    return AppContainer(
        settings=resolved_settings,
        gateway=gateway,
        open_upload=open_upload,
        close_resources=close_resources,
    )
