"""
In-memory stand-ins for the remote asset store and inference service.
"""

import asyncio
from types import SimpleNamespace

from src.dubby.models import MediaAsset

MIB = 1024 * 1024


def make_asset(size: int, mime_type: str = "video/mp4", name: str = "clip.mp4", content: bytes | None = None) -> MediaAsset:
    """Asset with a declared size; content stays small unless given."""
    return MediaAsset(content=content if content is not None else b"\x00" * 16, size=size, mime_type=mime_type, name=name)


def file_record(state: str, name: str = "files/abc123", uri: str = "https://store/files/abc123") -> SimpleNamespace:
    return SimpleNamespace(name=name, uri=uri, mime_type="video/mp4", state=state)


class FakeStore:
    """Returns a fixed upload response, then the queued get() responses in order."""

    def __init__(self, upload_response=None, get_responses=()):
        self.upload_response = upload_response if upload_response is not None else file_record("ACTIVE")
        self.get_responses = list(get_responses)
        self.uploads: list[tuple[str, str, int]] = []
        self.gets: list[str] = []

    async def upload(self, content: bytes, display_name: str, mime_type: str):
        self.uploads.append((display_name, mime_type, len(content)))
        return self.upload_response

    async def get(self, name: str):
        self.gets.append(name)
        return self.get_responses.pop(0)


class FakeInference:
    """Streams the given text chunks; optionally raises before chunk ``fail_at``."""

    def __init__(self, chunks=(), error: Exception | None = None, fail_at: int | None = None):
        self.chunks = list(chunks)
        self.error = error
        self.fail_at = fail_at
        self.requests = []

    async def stream(self, request):
        self.requests.append(request)
        return self._iterate()

    async def _iterate(self):
        for i, text in enumerate(self.chunks):
            if self.fail_at is not None and i == self.fail_at:
                raise self.error
            await asyncio.sleep(0)
            yield SimpleNamespace(text=text)
        if self.fail_at is not None and self.fail_at >= len(self.chunks):
            raise self.error


class FakeSleep:
    """Records requested delays and only yields to the event loop."""

    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


class FakePreview:
    def __init__(self, asset: MediaAsset):
        self.asset = asset
        self.url = f"preview://{asset.name}"
        self.release_count = 0

    def release(self) -> None:
        self.release_count += 1


async def collect(items):
    """Async iterator over a plain list."""
    for item in items:
        await asyncio.sleep(0)
        yield item
