"""Errors reported to the user, one message per failed run."""


class AnalyzerError(Exception):
    """Base class for every user-facing analysis failure."""


class ConfigError(AnalyzerError):
    """Inputs or settings are missing; raised before any API call."""


class UpstreamError(AnalyzerError):
    """The business context call failed or returned an unusable answer."""


class StreamError(AnalyzerError):
    """The classification stream failed to open or broke mid-read."""


class FileReadError(AnalyzerError):
    """The search terms file could not be read."""


class AnalysisCancelled(AnalyzerError):
    """The run was cancelled while the stream was being consumed."""


class RecordParseWarning(UserWarning):
    """A streamed line could not be decoded. Logged only, never raised."""
