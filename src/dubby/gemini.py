"""
Gemini adapters for the asset store and the streaming inference call.
"""

import base64
import io
import logging
from collections.abc import AsyncIterator
from typing import Any

from google import genai
from google.genai import types

from .config import Settings
from .errors import ConfigurationError
from .models import InferenceRequest, InlinePart, MediaPart, RemotePart

logger = logging.getLogger("dubby")


def make_client(settings: Settings) -> genai.Client:
    if not settings.api_key:
        raise ConfigurationError("GEMINI_API_KEY is not set. Put it in .env or environment.")
    return genai.Client(api_key=settings.api_key)


def to_genai_part(media: MediaPart) -> types.Part:
    if isinstance(media, InlinePart):
        return types.Part.from_bytes(data=base64.b64decode(media.data), mime_type=media.mime_type)
    if isinstance(media, RemotePart):
        return types.Part.from_uri(file_uri=media.uri, mime_type=media.mime_type)
    raise TypeError(f"Unsupported media part: {type(media).__name__}")


def to_genai_config(request: InferenceRequest) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        response_mime_type=request.response_mime_type,
        response_schema=request.response_schema,
        safety_settings=[
            types.SafetySetting(
                category=types.HarmCategory(category),
                threshold=types.HarmBlockThreshold(threshold),
            )
            for category, threshold in request.safety_settings
        ],
    )


def to_genai_contents(request: InferenceRequest) -> list[types.Content]:
    return [
        types.Content(
            role="user",
            parts=[to_genai_part(request.media), types.Part.from_text(text=request.instruction)],
        )
    ]


class GeminiAssetStore:
    """Gemini Files API: upload + status lookup."""

    def __init__(self, client: genai.Client):
        self.client = client

    async def upload(self, content: bytes, display_name: str, mime_type: str) -> types.File:
        return await self.client.aio.files.upload(
            file=io.BytesIO(content),
            config=types.UploadFileConfig(display_name=display_name, mime_type=mime_type),
        )

    async def get(self, name: str) -> types.File:
        return await self.client.aio.files.get(name=name)


class GeminiInference:
    """Streaming structured generation."""

    def __init__(self, client: genai.Client, model: str = "gemini-2.5-flash"):
        self.client = client
        self.model = model

    async def stream(self, request: InferenceRequest) -> AsyncIterator[Any]:
        logger.info(f"Requesting {request.target_language} script from {self.model} (streaming)")
        return await self.client.aio.models.generate_content_stream(
            model=self.model,
            contents=to_genai_contents(request),
            config=to_genai_config(request),
        )
