"""
Error types raised by the dubbing pipeline stages.
"""

TRUNCATION_HINT = "The video might be too long for a single pass."


class DubbyError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(DubbyError):
    """Missing or invalid configuration (e.g. no API key)."""


class VideoProcessingError(DubbyError):
    """Encoding or uploading the source video failed."""


class RemoteProcessingError(DubbyError):
    """The remote store reported the uploaded asset as FAILED."""


class MalformedUploadResponse(DubbyError):
    """The remote store returned a record without a usable identifier."""


class UploadTimeoutError(DubbyError):
    """The uploaded asset did not leave PROCESSING within the polling ceiling."""


class EmptyResponseError(DubbyError):
    """The inference stream finished without producing any text."""


class MalformedResponseError(DubbyError):
    """The accumulated inference response is not a valid segment array."""

    def __init__(self, message: str = "Failed to parse AI response.", hint: str = TRUNCATION_HINT):
        self.hint = hint
        super().__init__(f"{message} {hint}" if hint else message)
