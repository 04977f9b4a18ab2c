# errors.py
"""
Failure taxonomy of the contract import pipeline.

Every hard failure aborts the whole import; nothing downstream runs on a
partially parsed response. ``kind`` is a stable identifier the HTTP layer and
``ImportResult`` expose so callers can choose per-kind messaging.
"""

from typing import Optional


class ContractImportError(Exception):
    kind: str = "import_error"
    retryable: bool = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFormatError(ContractImportError):
    """File type cannot be processed by the configured backend (e.g. PDF on a text-only model)."""
    kind = "unsupported_format"

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.mime_type = mime_type


class DecodeFailureError(ContractImportError):
    kind = "decode_failure"

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.mime_type = mime_type


class BackendTransportError(ContractImportError):
    """
    Network or HTTP failure reaching the extraction backend.

    ``status_code`` and ``reason`` are None when the request never got a
    response (connection refused, timeout).
    """
    kind = "backend_transport"
    retryable = True

    def __init__(self, message: str, status_code: Optional[int] = None, reason: Optional[str] = None):
        super().__init__(message)
        self.status_code = status_code
        self.reason = reason


class EmptyResponseError(ContractImportError):
    kind = "empty_response"
    retryable = True


class MalformedOutputError(ContractImportError):
    kind = "malformed_output"

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
