"""
Named failure conditions raised by the ingestion and reporting core.

Line-level failures are recovered by the parser; everything else propagates
to the caller so the CLI or API layer can pick a message and exit code.
"""


class LogInsightsError(Exception):
    """Base class for all errors raised by log_insights."""


class InputNotFound(LogInsightsError):
    """The log file to load does not exist."""

    def __init__(self, path: str):
        super().__init__(f"Log file not found: {path}")
        self.path = path


class InvalidHost(LogInsightsError):
    """Hostname was empty or whitespace only."""

    def __init__(self, message: str = "Hostname is required when loading log files"):
        super().__init__(message)


class LineParseFailure(LogInsightsError):
    """A single line did not match the access log grammar."""

    def __init__(self, reason: str, line: str):
        super().__init__(f"{reason}: {line[:200]}")
        self.reason = reason
        self.line = line


class EmptyResult(LogInsightsError):
    """Every line of the input failed to parse."""

    def __init__(self, source: str = None):
        message = "No valid log entries found in the file"
        if source:
            message = f"{message}: {source}"
        super().__init__(message)
        self.source = source


class StorageFailure(LogInsightsError):
    """The database transaction could not be committed."""


class LookupFailure(LogInsightsError):
    """An organization lookup for an IP address failed."""
