"""
Remote asset upload and processing-state polling.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from .errors import MalformedUploadResponse, RemoteProcessingError, UploadTimeoutError
from .models import DEFAULT_MIME_TYPE, FileState, MediaAsset, RemoteAssetHandle

logger = logging.getLogger("dubby")

StatusCallback = Callable[[str], None]

# SDK state names -> our three states; anything unknown is treated as ready
_STATE_MAP = {
    "PROCESSING": FileState.PROCESSING,
    "ACTIVE": FileState.READY,
    "READY": FileState.READY,
    "FAILED": FileState.FAILED,
}


class AssetStore(Protocol):
    """Remote file store used for videos too large to inline."""

    async def upload(self, content: bytes, display_name: str, mime_type: str) -> Any: ...

    async def get(self, name: str) -> Any: ...


def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)


def _state_name(raw: Any) -> str:
    # Enums (FileState.ACTIVE) expose .name; SDK may also send plain strings
    name = getattr(raw, "name", None) or str(raw or "")
    return name.rsplit(".", 1)[-1].upper()


def normalize_upload_response(obj: Any) -> RemoteAssetHandle:
    """Turn a store response into a handle.

    The store sometimes returns the file record itself and sometimes wraps it
    under a ``file`` property; both objects and dicts are accepted.
    """
    record = _field(obj, "file") if obj is not None else None
    if record is None:
        record = obj
    name = _field(record, "name") if record is not None else None
    if not name:
        raise MalformedUploadResponse("Upload response missing file metadata.")

    raw_state = _state_name(_field(record, "state"))
    state = _STATE_MAP.get(raw_state)
    if state is None:
        logger.debug(f"Unknown remote state {raw_state!r} for {name}; treating as ready")
        state = FileState.READY

    return RemoteAssetHandle(
        name=str(name),
        uri=_field(record, "uri"),
        mime_type=_field(record, "mime_type") or _field(record, "mimeType"),
        state=state,
    )


async def upload_and_await_ready(
    asset: MediaAsset,
    store: AssetStore,
    on_status: StatusCallback | None = None,
    *,
    poll_interval: float = 2.0,
    max_attempts: int = 150,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> RemoteAssetHandle:
    """Upload an asset and poll the store until it is ready for inference.

    Raises:
        RemoteProcessingError: the remote store reported FAILED.
        UploadTimeoutError: still PROCESSING after ``max_attempts`` fetches.
        MalformedUploadResponse: a response carried no identifier.
    """

    def status(msg: str) -> None:
        if on_status:
            on_status(msg)

    mime_type = asset.mime_type or DEFAULT_MIME_TYPE
    logger.info(f"Uploading {asset.name} ({asset.size / (1024 * 1024):.1f} MiB, {mime_type}) …")
    handle = normalize_upload_response(await store.upload(asset.content, asset.name, mime_type))
    logger.info(f"File uploaded: {handle.uri}. State: {handle.state.value}")
    status("Video uploaded. Waiting for processing...")

    attempts = 0
    while handle.state is FileState.PROCESSING:
        if attempts >= max_attempts:
            raise UploadTimeoutError(
                f"Video still processing after {attempts} status checks "
                f"({attempts * poll_interval:.0f}s); giving up."
            )
        await sleep(poll_interval)
        attempts += 1
        handle = normalize_upload_response(await store.get(handle.name))
        logger.debug(f"Processing status ({attempts}): {handle.state.value}")
        status("Processing video on remote servers...")

    if handle.state is FileState.FAILED:
        raise RemoteProcessingError("Video processing failed on remote servers.")

    logger.info(f"File ready for inference: {handle.uri}")
    status("Video processed. Generating insights...")
    return handle
