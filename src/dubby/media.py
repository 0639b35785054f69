"""
Media encoding: inline base64 payloads for small videos, remote upload for large ones.
"""

import asyncio
import base64
import logging
import os
import tempfile
from collections.abc import Awaitable, Callable
from typing import Any

from .config import Settings
from .models import DEFAULT_MIME_TYPE, InlinePart, MediaAsset, MediaPart, RemotePart
from .upload import AssetStore, StatusCallback, upload_and_await_ready

logger = logging.getLogger("dubby")


def read_inline_part(asset: MediaAsset) -> InlinePart:
    """Encode the whole asset as base64."""
    data = base64.b64encode(asset.content).decode("ascii")
    return InlinePart(data=data, mime_type=asset.mime_type or DEFAULT_MIME_TYPE)


async def encode_media(
    asset: MediaAsset,
    store: AssetStore,
    on_status: StatusCallback | None = None,
    settings: Settings | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> MediaPart:
    """Convert an asset into a request media part.

    Files strictly below the inline limit are embedded; anything else is
    uploaded to the remote store and referenced by URI once it is ready.
    """
    settings = settings or Settings()
    limit = settings.inline_limit_bytes

    if asset.size < limit:
        if on_status:
            on_status("Analyzing local video file...")
        logger.info(f"Encoding {asset.name} inline ({asset.size} bytes < {limit})")
        # Reading / base64 of large buffers blocks; keep the event loop free
        return await asyncio.to_thread(read_inline_part, asset)

    if on_status:
        on_status("Uploading large video...")
    handle = await upload_and_await_ready(
        asset,
        store,
        on_status,
        poll_interval=settings.poll_interval_s,
        max_attempts=settings.max_poll_attempts,
        sleep=sleep,
    )
    return RemotePart(uri=handle.uri or handle.name, mime_type=handle.mime_type or asset.mime_type or DEFAULT_MIME_TYPE)


class MediaPreview:
    """Temporary playable copy of an asset for the browser video player."""

    def __init__(self, path: str):
        self.path = path
        self.released = False

    @property
    def url(self) -> str:
        return self.path

    def release(self) -> None:
        if self.released:
            return
        self.released = True
        try:
            os.unlink(self.path)
        except FileNotFoundError:
            pass
        logger.debug(f"Released preview {self.path}")


def open_preview(asset: MediaAsset) -> MediaPreview:
    """Spool the asset to a temp file the UI can play."""
    suffix = os.path.splitext(asset.name)[1] or ".mp4"
    with tempfile.NamedTemporaryFile(prefix="dubby_", suffix=suffix, delete=False) as f:
        f.write(asset.content)
    return MediaPreview(f.name)
