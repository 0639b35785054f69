"""
Data models for the dubbing pipeline.
"""

import mimetypes
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from .timestamps import parse_timestamp

DEFAULT_MIME_TYPE = "video/mp4"


class PipelineState(str, Enum):
    """Lifecycle of a single dubbing run, as shown by the UI."""

    IDLE = "IDLE"
    FILE_SELECTED = "FILE_SELECTED"
    ANIMATING_INTO_MOUTH = "ANIMATING_INTO_MOUTH"
    PROCESSING_WATCHING = "PROCESSING_WATCHING"
    PROCESSING_REWRITING = "PROCESSING_REWRITING"
    COMPLETE = "COMPLETE"

    @property
    def is_processing(self) -> bool:
        return self in (PipelineState.PROCESSING_WATCHING, PipelineState.PROCESSING_REWRITING)


class FileState(str, Enum):
    """Processing state of an uploaded remote asset."""

    PROCESSING = "PROCESSING"
    READY = "READY"
    FAILED = "FAILED"


class Language(str, Enum):
    SPANISH = "Spanish"
    HINDI = "Hindi"
    GERMAN = "German"


class Voice(str, Enum):
    PUCK = "Puck"
    CHARON = "Charon"
    KORE = "Kore"
    FENRIR = "Fenrir"
    ZEPHYR = "Zephyr"


@dataclass
class MediaAsset:
    """The user's source video, held in memory for one run."""

    content: bytes = field(repr=False)
    size: int
    mime_type: str  # may be empty when the browser declares none
    name: str

    @classmethod
    def from_path(cls, path: str, mime_type: str | None = None) -> "MediaAsset":
        """Load a local file (e.g. a browser upload spooled to disk)."""
        with open(path, "rb") as f:
            content = f.read()
        if mime_type is None:
            mime_type = mimetypes.guess_type(path)[0] or ""
        return cls(content=content, size=len(content), mime_type=mime_type, name=os.path.basename(path))


@dataclass(frozen=True)
class RemoteAssetHandle:
    """Server-side copy of an uploaded MediaAsset."""

    name: str
    uri: str | None
    mime_type: str | None
    state: FileState


@dataclass(frozen=True)
class InlinePart:
    """Media embedded directly in the request body."""

    data: str = field(repr=False)  # base64
    mime_type: str


@dataclass(frozen=True)
class RemotePart:
    """Reference to a media file already uploaded to the remote store."""

    uri: str
    mime_type: str


MediaPart = Union[InlinePart, RemotePart]


@dataclass(frozen=True)
class InferenceRequest:
    """Everything needed for one structured generation call."""

    media: MediaPart
    instruction: str
    target_language: str
    response_schema: dict[str, Any]
    safety_settings: tuple[tuple[str, str], ...]
    response_mime_type: str = "application/json"


@dataclass(frozen=True)
class Segment:
    """One timed utterance with its transcription and compressed translation."""

    id: str
    start_time: str  # MM:SS.mmm
    end_time: str  # MM:SS.mmm
    original_text: str
    optimized_text: str
    reasoning: str | None = None

    @property
    def start(self) -> float:
        return parse_timestamp(self.start_time)

    @property
    def end(self) -> float:
        return parse_timestamp(self.end_time)

    @classmethod
    def from_dict(cls, item: dict[str, Any], id: str, reasoning: str | None = None) -> "Segment":
        """Build a Segment from a response object using the wire field names."""
        return cls(
            id=id,
            start_time=str(item["startTime"]),
            end_time=str(item["endTime"]),
            original_text=str(item["originalText"]),
            optimized_text=str(item["optimizedText"]),
            reasoning=reasoning if reasoning is not None else item.get("reasoning"),
        )

    def to_dict(self) -> dict[str, Any]:
        out = {
            "id": self.id,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "originalText": self.original_text,
            "optimizedText": self.optimized_text,
        }
        if self.reasoning is not None:
            out["reasoning"] = self.reasoning
        return out
