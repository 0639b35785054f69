"""
Browser front-end (Gradio) for the dubbing pipeline.
"""

import argparse
import asyncio
import logging

import gradio as gr

from .config import Settings, load_settings
from .gemini import GeminiAssetStore, GeminiInference, make_client
from .models import Language, MediaAsset, Voice
from .pipeline import DubbingPipeline

logger = logging.getLogger("dubby")

RESULT_HEADERS = ["#", "Start", "End", "Original", "Dubbed", "Notes"]
STATUS_REFRESH_S = 0.3


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")


class DubbySession:
    """Per-browser-tab wrapper around one pipeline."""

    def __init__(self, pipeline: DubbingPipeline):
        self.pipeline = pipeline

    def rows(self) -> list[list[str]]:
        return [
            [s.id, s.start_time, s.end_time, s.original_text, s.optimized_text, s.reasoning or ""]
            for s in self.pipeline.results
        ]

    def close(self) -> None:
        self.pipeline.close()

    def snapshot(self) -> tuple[str | None, str, str, list[list[str]]]:
        p = self.pipeline
        return (p.preview.url if p.preview else None), p.state.value, p.status, self.rows()


def release_session(session: DubbySession | None) -> None:
    """Delete the preview file of a session whose browser tab went away."""
    if session is not None:
        logger.debug("Session ended; releasing preview")
        session.close()


def build_app(settings: Settings | None = None) -> gr.Blocks:
    settings = settings or load_settings()
    client = make_client(settings)
    store = GeminiAssetStore(client)
    inference = GeminiInference(client, settings.model)

    def new_session() -> DubbySession:
        return DubbySession(DubbingPipeline(store, inference, settings))

    def on_upload(session: DubbySession | None, path: str | None):
        session = session or new_session()
        if path:
            session.pipeline.select_file(MediaAsset.from_path(path))
        return (session, *session.snapshot())

    def on_clear(session: DubbySession | None):
        session = session or new_session()
        session.pipeline.remove_media()
        return (session, *session.snapshot())

    async def on_dub(session: DubbySession | None, language: str, voice: str):
        if session is None or session.pipeline.asset is None:
            yield "IDLE", "Upload a video first.", []
            return

        p = session.pipeline
        task = asyncio.ensure_future(p.dub(language, voice))
        while not task.done():
            yield p.state.value, p.status, session.rows()
            await asyncio.wait([task], timeout=STATUS_REFRESH_S)
        await task
        yield p.state.value, p.status, session.rows()

    with gr.Blocks(title="Dubby") as app:
        gr.Markdown("# Dubby\n**Transcribe a video and get a lip-sync-friendly translation.**")
        session_state = gr.State(None, delete_callback=release_session)

        with gr.Row():
            with gr.Column():
                file_input = gr.File(
                    label="Video", file_types=[".mp4", ".mov", ".webm", ".mkv"], type="filepath"
                )
                video_preview = gr.Video(label="Preview", height=300, interactive=False)
            with gr.Column():
                target_language = gr.Dropdown(
                    [lang.value for lang in Language], label="Target Language", value=Language.SPANISH.value
                )
                voice = gr.Dropdown([v.value for v in Voice], label="Voice", value=Voice.PUCK.value)
                btn_dub = gr.Button("Dub it", variant="primary")
                state_label = gr.Textbox(label="Stage", value="IDLE", interactive=False)
                status = gr.Textbox(label="Status", interactive=False)

        results = gr.Dataframe(headers=RESULT_HEADERS, label="Segments", interactive=False, wrap=True)

        file_input.upload(
            on_upload, [session_state, file_input], [session_state, video_preview, state_label, status, results]
        )
        file_input.clear(on_clear, [session_state], [session_state, video_preview, state_label, status, results])
        btn_dub.click(on_dub, [session_state, target_language, voice], [state_label, status, results])

    return app


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Dubby browser app")
    ap.add_argument("--host", default=None, help="Server address (default from DUBBY_HOST)")
    ap.add_argument("--port", type=int, default=None, help="Server port (default from DUBBY_PORT)")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return ap.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(args.verbose)
    settings = load_settings()
    app = build_app(settings)
    app.queue().launch(
        server_name=args.host or settings.server_name,
        server_port=args.port or settings.server_port,
    )


if __name__ == "__main__":
    main()
