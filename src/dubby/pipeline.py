"""
Dubbing pipeline orchestrator and its UI-facing state machine.

IDLE -> FILE_SELECTED -> ANIMATING_INTO_MOUTH -> PROCESSING_WATCHING
     -> PROCESSING_REWRITING -> COMPLETE -> (remove) IDLE

COMPLETE also accepts a new selection (-> FILE_SELECTED) or a re-dub of the
staged file, since the results view keeps the video loaded.
"""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Protocol

from .assembler import assemble_from_stream
from .config import Settings
from .errors import VideoProcessingError
from .media import MediaPreview, encode_media, open_preview
from .models import InferenceRequest, Language, MediaAsset, MediaPart, PipelineState, Segment, Voice
from .request import build_request
from .timestamps import format_timestamp
from .upload import AssetStore

logger = logging.getLogger("dubby")

ERROR_SEGMENT_ID = "err1"
ERROR_WINDOW_S = 5.0

# States from which a new file may be staged
_SELECTABLE = (PipelineState.IDLE, PipelineState.FILE_SELECTED, PipelineState.COMPLETE)


class InferenceService(Protocol):
    async def stream(self, request: InferenceRequest) -> AsyncIterator[Any]: ...


def error_segment(error: BaseException) -> Segment:
    """Single placeholder segment shown when a run fails."""
    return Segment(
        id=ERROR_SEGMENT_ID,
        start_time=format_timestamp(0),
        end_time=format_timestamp(ERROR_WINDOW_S),
        original_text="Error processing video.",
        optimized_text="Error al procesar el video.",
        reasoning=f"Error details: {error}",
    )


class DubbingPipeline:
    """Sequences encode -> upload -> request -> stream -> assemble for one video.

    UI collaborators observe the run through ``on_state`` (every transition)
    and ``on_status`` (progress text). Failures never escape :meth:`dub`; they
    become a single error segment and the machine still reaches COMPLETE.
    """

    def __init__(
        self,
        store: AssetStore,
        inference: InferenceService,
        settings: Settings | None = None,
        *,
        on_state: Callable[[PipelineState], None] | None = None,
        on_status: Callable[[str], None] | None = None,
        preview_factory: Callable[[MediaAsset], MediaPreview] = open_preview,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self.store = store
        self.inference = inference
        self.settings = settings or Settings()
        self.on_state = on_state
        self.on_status = on_status
        self.preview_factory = preview_factory
        self.sleep = sleep

        self._state = PipelineState.IDLE
        self._status = ""
        self._asset: MediaAsset | None = None
        self._preview: MediaPreview | None = None
        self._results: list[Segment] = []
        self._run_token: object | None = None

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def status(self) -> str:
        return self._status

    @property
    def results(self) -> list[Segment]:
        return list(self._results)

    @property
    def asset(self) -> MediaAsset | None:
        return self._asset

    @property
    def preview(self) -> MediaPreview | None:
        return self._preview

    @property
    def is_running(self) -> bool:
        return self._run_token is not None

    def _transition(self, state: PipelineState) -> None:
        logger.info(f"[state] {self._state.value} -> {state.value}")
        self._state = state
        if self.on_state:
            self.on_state(state)

    def _set_status(self, text: str) -> None:
        self._status = text
        if self.on_status:
            self.on_status(text)

    def _swap_preview(self, asset: MediaAsset | None) -> None:
        if self._preview is not None:
            self._preview.release()
            self._preview = None
        if asset is not None:
            self._preview = self.preview_factory(asset)

    # --- UI events ---

    def select_file(self, asset: MediaAsset) -> None:
        if self.is_running or self._state not in _SELECTABLE:
            logger.warning(f"Ignoring file selection while {self._state.value}")
            return
        logger.info(f"Selected {asset.name} ({asset.size} bytes, {asset.mime_type or 'unknown type'})")
        self._swap_preview(asset)
        self._asset = asset
        self._results = []
        self._transition(PipelineState.FILE_SELECTED)

    def close(self) -> None:
        """Release the display reference when the owning session goes away.

        Safe while a run is in flight: the run reads the asset, not the preview.
        """
        self._swap_preview(None)

    def remove_media(self) -> None:
        if self.is_running:
            logger.warning("Ignoring media removal while a run is in flight")
            return
        self._swap_preview(None)
        self._asset = None
        self._results = []
        self._set_status("")
        self._transition(PipelineState.IDLE)

    @contextlib.contextmanager
    def _claim_run(self):
        token = object()
        self._run_token = token
        try:
            yield token
        finally:
            self._run_token = None

    async def dub(
        self, target_language: str | Language = Language.SPANISH, voice: str | Voice | None = None
    ) -> list[Segment] | None:
        """Run the whole pipeline; returns None if no file is staged or a run is in flight."""
        asset = self._asset
        if asset is None or self.is_running:
            logger.info("Dub request ignored (no file selected or run already in progress)")
            return None

        language = target_language.value if isinstance(target_language, Language) else target_language
        voice_name = voice.value if isinstance(voice, Voice) else voice
        logger.info(f"Starting dub run: {asset.name} -> {language} (voice: {voice_name or 'default'})")

        with self._claim_run():
            self._transition(PipelineState.ANIMATING_INTO_MOUTH)
            await self.sleep(self.settings.intro_delay_s)
            self._transition(PipelineState.PROCESSING_WATCHING)

            try:
                results = await self._generate(asset, target_language)
                await self.sleep(self.settings.settle_delay_s)
            except Exception as e:
                logger.error(f"Error generating dubbing script: {e}")
                results = [error_segment(e)]

            self._results = results
            self._transition(PipelineState.COMPLETE)
            return list(results)

    async def _encode(self, asset: MediaAsset) -> MediaPart:
        try:
            return await encode_media(asset, self.store, self._set_status, self.settings, sleep=self.sleep)
        except Exception as e:
            raise VideoProcessingError(f"Failed to process video: {e}") from e

    async def _generate(self, asset: MediaAsset, target_language: str | Language) -> list[Segment]:
        # Minimum perceptible "watching" phase, joined with the real encoding work
        encoding = asyncio.ensure_future(self._encode(asset))
        watching = asyncio.ensure_future(self.sleep(self.settings.min_watch_s))
        try:
            media_part, _ = await asyncio.gather(encoding, watching)
        except BaseException:
            for task in (encoding, watching):
                task.cancel()
            raise

        self._transition(PipelineState.PROCESSING_REWRITING)
        self._set_status("Generating script (this may take a moment)...")

        request = build_request(media_part, target_language)
        stream = await self.inference.stream(request)
        return await assemble_from_stream(stream, self._set_status)
