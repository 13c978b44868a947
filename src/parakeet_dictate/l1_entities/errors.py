"""Domain error types."""


class SttError(Exception):
    """Base class for every error raised by the speech-to-text core."""


class NotReadyError(SttError):
    """Raised when an operation needs a loaded model and none is Ready."""


class NotRecordingError(SttError):
    """Raised when audio is pushed or a transcription requested outside a recording."""


class DownloadError(SttError):
    """Raised when fetching a model artifact fails. The partial directory is kept."""


class LoadError(SttError):
    """Raised when the vocabulary or an inference engine cannot be built."""


class VocabularyParseError(LoadError):
    """Raised on a malformed vocabulary line or a non-integer token id."""


class InferenceError(SttError):
    """Raised when an inference engine call fails."""


class StateSizeError(SttError):
    """Raised when the decoder returns recurrent state of an unexpected size."""


class LockError(SttError):
    """Raised when the session lock cannot be acquired."""
