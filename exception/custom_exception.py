"""
Exception hierarchy for the legal document analyzer.

Every error carries the file and line of the traceback that was active when it
was raised (if any), so log lines point at the failing engine call rather than
at the wrapper that translated it.
"""
from typing import Optional


class LegalAnalyzerException(Exception):
    """Base exception. Pass ``sys`` to capture the active traceback location."""

    def __init__(self, error_message: str, error_details: Optional[object] = None):
        super().__init__(str(error_message))
        self.error_message = str(error_message)
        self.file_name: Optional[str] = None
        self.lineno: Optional[int] = None

        exc_info = getattr(error_details, "exc_info", None)
        if callable(exc_info):
            _, _, exc_tb = exc_info()
            # walk to the innermost frame, that is where the engine failed
            while exc_tb is not None and exc_tb.tb_next is not None:
                exc_tb = exc_tb.tb_next
            if exc_tb is not None:
                self.file_name = exc_tb.tb_frame.f_code.co_filename
                self.lineno = exc_tb.tb_lineno

    def __str__(self) -> str:
        if self.file_name:
            return f"Error in [{self.file_name}] at line [{self.lineno}] | Message: {self.error_message}"
        return self.error_message


class ExtractionError(LegalAnalyzerException):
    """No usable text could be produced (corrupt PDF, engine failure...)."""


class UnsupportedFileTypeError(ExtractionError):
    pass


class EmptyDocumentError(ExtractionError):
    """The decoded document is empty or whitespace only."""


class ExtractionTimeoutError(LegalAnalyzerException):
    pass


class OcrError(LegalAnalyzerException):
    """OCR engine failure. Always absorbed by the text extractor."""


class EmptyContentError(LegalAnalyzerException):
    """Extraction succeeded but produced nothing to analyze."""


class AnalysisTimeoutError(LegalAnalyzerException):
    pass


class AnalysisServiceError(LegalAnalyzerException):
    """The LLM analysis/comparison service failed or returned an unusable reply."""


class StorageError(LegalAnalyzerException):
    pass


__all__ = [
    "LegalAnalyzerException",
    "ExtractionError",
    "UnsupportedFileTypeError",
    "EmptyDocumentError",
    "ExtractionTimeoutError",
    "OcrError",
    "EmptyContentError",
    "AnalysisTimeoutError",
    "AnalysisServiceError",
    "StorageError",
]
