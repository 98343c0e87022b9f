"""Fluent entry point for publishing a single panorama.

Usage::

    upload = await StreetViewUpload.open(
        {"api_key": "...", "access_token": "..."}, gateway
    )
    photo_id = await (
        upload.photo("./panorama.jpg")
        .metadata({"latitude": 21.2, "longitude": -73.4, "created": 1000000000})
        .upload()
    )
"""

import os
from collections.abc import Mapping

from streetview_publish.adapters.publish_client import PublishGateway
from streetview_publish.domain.uploads import UploadState
from streetview_publish.services.sessions import UploadSession


class StreetViewUpload:
    """Photo, then metadata, then upload, over a single configured session."""

    def __init__(self, session: UploadSession) -> None:
        self._session = session

    @classmethod
    async def open(
        cls, config: Mapping[str, object] | None, gateway: PublishGateway
    ) -> "StreetViewUpload":
        """Validate credentials and acquire an upload endpoint."""
        session = UploadSession(gateway)
        await session.configure(config)
        return cls(session)

    @property
    def state(self) -> UploadState:
        return self._session.state

    @property
    def photo_id(self) -> str | None:
        return self._session.photo_id

    def photo(self, path: str | os.PathLike[str]) -> "StreetViewUpload":
        self._session.set_photo(path)
        return self

    def metadata(self, data: Mapping[str, object] | None) -> "StreetViewUpload":
        self._session.set_metadata(data)
        return self

    async def upload(self) -> str:
        """Send the photo and return the provider's photo id."""
        return await self._session.execute()
