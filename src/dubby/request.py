"""
Structured generation request for transcription + lip-sync-friendly translation.
"""

from .models import InferenceRequest, Language, MediaPart

SEGMENT_FIELDS = ("startTime", "endTime", "originalText", "optimizedText")

SEGMENT_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {name: {"type": "STRING"} for name in SEGMENT_FIELDS},
        "required": list(SEGMENT_FIELDS),
    },
}

# Source material may contain any register of speech
SAFETY_SETTINGS = (
    ("HARM_CATEGORY_HATE_SPEECH", "BLOCK_NONE"),
    ("HARM_CATEGORY_SEXUALLY_EXPLICIT", "BLOCK_NONE"),
    ("HARM_CATEGORY_HARASSMENT", "BLOCK_NONE"),
    ("HARM_CATEGORY_DANGEROUS_CONTENT", "BLOCK_NONE"),
)


def build_instruction(target_language: str) -> str:
    return f"""You are Dubby, an expert AI video dubbing assistant.
**TASK: Transcription & Translation**
1. **Transcribe**: Listen to the ENTIRE audio track. Write down the 'originalText' exactly as spoken.
2. **Translate & Compress**: Translate to {target_language}.
   **CRITICAL**: The 'optimizedText' MUST be concise. It should be speakable in the SAME duration as the original.
   Prefer shorter synonyms. Remove filler words.
   The goal is PERFECT LIP SYNC, so match the syllable count and rhythm of the original speech as closely as possible.

For each spoken segment:
1. 'startTime' & 'endTime': "MM:SS.mmm". Precision is key.
2. 'originalText': Verbatim.
3. 'optimizedText': {target_language} translation (Concise & Rhythmic).

Output MUST be a JSON array containing ALL segments."""


def build_request(media_part: MediaPart, target_language: str | Language) -> InferenceRequest:
    """Combine the media reference, instruction and response constraints."""
    language = target_language.value if isinstance(target_language, Language) else str(target_language)
    return InferenceRequest(
        media=media_part,
        instruction=build_instruction(language),
        target_language=language,
        response_schema=SEGMENT_SCHEMA,
        safety_settings=SAFETY_SETTINGS,
    )
