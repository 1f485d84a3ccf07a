"""
Copyright (c) 2025 Eric C. Mumford (@heymumford)
This file is part of JTOQ, licensed under the MIT License.
See LICENSE file for details.
"""

"""Exception types raised by JTOQ components."""


class JtoqError(Exception):
    """Base class for JTOQ errors."""


class JsonParseError(JtoqError):
    """Raised by the strict JSON parsing tier when the text is not valid JSON."""


class ResultParseError(JtoqError):
    """Raised when a JUnit XML results file cannot be parsed."""

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(f"{source}: {message}" if source else message)


class SubmissionError(JtoqError):
    """Raised when qTest rejects or cannot receive a submission."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)
