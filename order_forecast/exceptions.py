"""
Error types raised by the analysis pipeline
"""

from typing import Optional


class PipelineError(Exception):
    """
    Base class for all pipeline failures

    Carries the failing stage and the input it was working on so the
    caller can report both.
    """

    def __init__(self, message: str, stage: Optional[str] = None, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.source = source

    def __str__(self):
        details = []
        if self.stage:
            details.append(f"stage={self.stage}")
        if self.source:
            details.append(f"input={self.source}")
        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message


class FileError(PipelineError, OSError):
    """Input file is missing, unreadable or malformed"""


class ParseError(PipelineError, ValueError):
    """A date or numeric field does not match the expected format"""


class EmptySeriesError(PipelineError, ValueError):
    """A stage produced no rows, leaving the next computation undefined"""
