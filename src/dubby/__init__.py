"""
Dubby - Video transcription and lip-sync-friendly translation.

A small pipeline for:
- Staging a local video (inline payload or remote upload with polling)
- Requesting a structured transcription + compressed translation from Gemini
- Assembling the streamed JSON response into timed segments
- Driving the browser UI through a single pipeline state machine
"""

__version__ = "0.1.0"
