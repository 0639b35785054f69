"""
Tests for the browser session wrapper.
"""

import asyncio

from src.dubby.app import RESULT_HEADERS, DubbySession, release_session
from src.dubby.pipeline import DubbingPipeline
from src.tests.fakes import MIB, FakeInference, FakePreview, FakeSleep, FakeStore, make_asset

HELLO = '[{"startTime":"00:00.000","endTime":"00:02.000","originalText":"Hi","optimizedText":"Hola"}]'


def test_session_rows_and_snapshot():
    pipeline = DubbingPipeline(FakeStore(), FakeInference([HELLO]), preview_factory=FakePreview, sleep=FakeSleep())
    session = DubbySession(pipeline)

    assert session.snapshot() == (None, "IDLE", "", [])

    pipeline.select_file(make_asset(MIB, name="talk.mp4"))
    asyncio.run(pipeline.dub("Spanish"))

    preview_url, state, status, rows = session.snapshot()
    assert preview_url == "preview://talk.mp4"
    assert state == "COMPLETE"
    assert status.startswith("Receiving synchronization data")
    assert rows == [["0", "00:00.000", "00:02.000", "Hi", "Hola", "Optimized for timing."]]
    assert len(rows[0]) == len(RESULT_HEADERS)


def test_release_session_deletes_preview():
    pipeline = DubbingPipeline(FakeStore(), FakeInference([HELLO]), preview_factory=FakePreview, sleep=FakeSleep())
    session = DubbySession(pipeline)
    pipeline.select_file(make_asset(MIB))
    preview = pipeline.preview

    release_session(session)
    release_session(None)

    assert preview.release_count == 1
    assert pipeline.preview is None
