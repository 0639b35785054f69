"""
Tests for the Gemini adapters (no network: the client is faked).
"""

import asyncio
import base64
import io
from types import SimpleNamespace

import pytest
from google.genai import types

from src.dubby.config import Settings
from src.dubby.errors import ConfigurationError
from src.dubby.gemini import (
    GeminiAssetStore,
    GeminiInference,
    make_client,
    to_genai_config,
    to_genai_part,
)
from src.dubby.models import InlinePart, RemotePart
from src.dubby.request import build_request


class FakeFiles:
    def __init__(self):
        self.calls = []

    async def upload(self, file, config):
        self.calls.append(("upload", file, config))
        return SimpleNamespace(name="files/1", state="PROCESSING")

    async def get(self, name):
        self.calls.append(("get", name))
        return SimpleNamespace(name=name, state="ACTIVE")


class FakeModels:
    def __init__(self):
        self.calls = []

    async def generate_content_stream(self, model, contents, config):
        self.calls.append((model, contents, config))

        async def chunks():
            yield SimpleNamespace(text="[]")

        return chunks()


def fake_client():
    return SimpleNamespace(aio=SimpleNamespace(files=FakeFiles(), models=FakeModels()))


def test_make_client_requires_key():
    with pytest.raises(ConfigurationError):
        make_client(Settings(api_key=None))


def test_inline_and_remote_parts():
    inline = to_genai_part(InlinePart(data=base64.b64encode(b"video").decode(), mime_type="video/mp4"))
    assert inline.inline_data.data == b"video"
    assert inline.inline_data.mime_type == "video/mp4"

    remote = to_genai_part(RemotePart(uri="https://store/files/1", mime_type="video/webm"))
    assert remote.file_data.file_uri == "https://store/files/1"
    assert remote.file_data.mime_type == "video/webm"


def test_generate_config():
    request = build_request(InlinePart(data="", mime_type="video/mp4"), "Spanish")
    config = to_genai_config(request)

    assert config.response_mime_type == "application/json"
    assert config.response_schema is not None
    assert len(config.safety_settings) == 4
    assert {s.threshold for s in config.safety_settings} == {types.HarmBlockThreshold.BLOCK_NONE}
    assert types.HarmCategory.HARM_CATEGORY_HARASSMENT in {s.category for s in config.safety_settings}


def test_asset_store_calls_files_api():
    client = fake_client()
    store = GeminiAssetStore(client)

    asyncio.run(store.upload(b"abc", "clip.mp4", "video/mp4"))
    asyncio.run(store.get("files/1"))

    kind, file, config = client.aio.files.calls[0]
    assert kind == "upload"
    assert isinstance(file, io.BytesIO)
    assert file.getvalue() == b"abc"
    assert config.display_name == "clip.mp4"
    assert config.mime_type == "video/mp4"
    assert client.aio.files.calls[1] == ("get", "files/1")


def test_inference_stream_sends_media_then_instruction():
    client = fake_client()
    inference = GeminiInference(client, model="gemini-test")
    request = build_request(RemotePart(uri="https://store/files/1", mime_type="video/mp4"), "Hindi")

    async def run():
        stream = await inference.stream(request)
        return [chunk.text async for chunk in stream]

    assert asyncio.run(run()) == ["[]"]
    model, contents, config = client.aio.models.calls[0]
    assert model == "gemini-test"
    parts = contents[0].parts
    assert parts[0].file_data.file_uri == "https://store/files/1"
    assert "Hindi" in parts[1].text
    assert config.response_mime_type == "application/json"
