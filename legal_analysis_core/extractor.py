"""
Text extraction for Legal Analysis Core.
This module provides the TextExtractor service, which turns an uploaded PDF, plain-text
file or scanned image into plain text. PDF pages are read from their embedded text layer;
pages without a usable text layer are rendered and routed through the OCR adapter.
The PDF engine and the OCR adapter are injected so tests can substitute them.
"""
import asyncio
import io
import sys
from typing import Any, Optional, Protocol

import fitz  # PyMuPDF
from PIL import Image, ImageOps, UnidentifiedImageError

from exception.custom_exception import (
    EmptyDocumentError,
    ExtractionError,
    UnsupportedFileTypeError,
)
from legal_analysis_core.ocr import OcrAdapter, TesseractOcr
from logger import GLOBAL_LOGGER as log
from model.models import PipelineSettings, UploadedDocument

TEXT_SUFFIXES = {".txt", ".text", ".md"}
IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff"}
LOW_CONFIDENCE_PREFIX = "Limited text extracted from PDF"


class PdfStructureError(ValueError):
    """The bytes could not be parsed as a PDF document."""


class PdfBackend(Protocol):
    def open(self, content: bytes) -> Any: ...
    def page_count(self, doc: Any) -> int: ...
    def page_text(self, doc: Any, index: int) -> str: ...
    def render_page(self, doc: Any, index: int, scale: float) -> Image.Image: ...
    def close(self, doc: Any) -> None: ...


class PyMuPdfBackend:
    """PDF engine backed by PyMuPDF."""

    def open(self, content: bytes) -> fitz.Document:
        try:
            return fitz.open(stream=content, filetype="pdf")
        except (fitz.FileDataError, fitz.EmptyFileError) as e:
            raise PdfStructureError(str(e)) from e

    def page_count(self, doc: fitz.Document) -> int:
        return doc.page_count

    def page_text(self, doc: fitz.Document, index: int) -> str:
        return doc[index].get_text("text")

    def render_page(self, doc: fitz.Document, index: int, scale: float) -> Image.Image:
        pix = doc[index].get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
        return Image.frombytes("RGB", (pix.width, pix.height), pix.samples)

    def close(self, doc: fitz.Document) -> None:
        doc.close()


def is_low_confidence(text: str) -> bool:
    """True when ``text`` is the extractor's short-document diagnostic."""
    return text.startswith(LOW_CONFIDENCE_PREFIX)


class TextExtractor:
    """
    Extracts plain text from uploaded documents.

    Usage:
        extractor = TextExtractor()
        text = await extractor.extract_text(document)
    """
    def __init__(
        self,
        pdf_backend: Optional[PdfBackend] = None,
        ocr_adapter: Optional[OcrAdapter] = None,
        settings: Optional[PipelineSettings] = None,
    ) -> None:
        self.settings = settings or PipelineSettings()
        self.pdf_backend = pdf_backend or PyMuPdfBackend()
        self.ocr_adapter = ocr_adapter or TesseractOcr(
            language=self.settings.ocr_language, psm=self.settings.ocr_psm
        )

    async def extract_text(self, document: UploadedDocument) -> str:
        """
        Extract text from a PDF, text file or image.
        Args:
            document (UploadedDocument): File name, raw bytes and optional content type.
        Returns:
            str: Extracted text, or a low-confidence diagnostic for near-empty PDFs.
        """
        kind = self.detect_kind(document)
        log.info("Starting text extraction", file=document.file_name, kind=kind, size=document.size)
        if kind == "text":
            return self._extract_plain_text(document)
        if kind == "pdf":
            return await self._extract_pdf(document)
        if kind == "image":
            return await self._extract_image(document)
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {document.content_type or document.suffix or 'unknown'}"
        )

    def detect_kind(self, document: UploadedDocument) -> str:
        """One of "pdf", "text", "image" or "unsupported"."""
        content_type = (document.content_type or "").split(";")[0].strip().lower()
        suffix = document.suffix
        if content_type == "application/pdf" or suffix == ".pdf":
            return "pdf"
        if content_type.startswith("text/") or suffix in TEXT_SUFFIXES:
            return "text"
        if content_type.startswith("image/") or suffix in IMAGE_SUFFIXES:
            return "image"
        return "unsupported"

    def _extract_plain_text(self, document: UploadedDocument) -> str:
        text = document.content.decode("utf-8-sig", errors="replace")
        if not text.strip():
            log.warning("Text document is empty", file=document.file_name)
            raise EmptyDocumentError("Document appears to be empty")
        log.info("Text document decoded", file=document.file_name, chars=len(text))
        return text

    async def _extract_pdf(self, document: UploadedDocument) -> str:
        # open, page loop and close share one worker thread; a cancelled caller
        # abandons the thread, which still closes the document itself
        text = await asyncio.to_thread(self._extract_pdf_sync, document)
        if len(text) < self.settings.min_document_chars:
            log.warning("PDF extracted very little text", file=document.file_name, chars=len(text))
            return (
                f"{LOW_CONFIDENCE_PREFIX} ({len(text)} characters): {text}. "
                "This may be a scanned document with poor OCR results. "
                "Please try with a higher quality PDF or contact support for assistance."
            )

        log.info("PDF text extracted", file=document.file_name, chars=len(text))
        return text

    def _extract_pdf_sync(self, document: UploadedDocument) -> str:
        try:
            doc = self.pdf_backend.open(document.content)
        except Exception as e:
            log.error("PDF could not be opened", file=document.file_name, error=str(e))
            raise ExtractionError(self._describe_pdf_failure(e), sys) from e

        page_texts = []
        try:
            page_count = self.pdf_backend.page_count(doc)
            log.info("PDF loaded", file=document.file_name, pages=page_count)
            # one page at a time: keeps a single rendered bitmap in memory
            for index in range(page_count):
                page_text = self._extract_page(doc, index)
                if page_text:
                    page_texts.append(page_text)
        except Exception as e:
            log.error("PDF parsing error", file=document.file_name, error=str(e))
            raise ExtractionError(self._describe_pdf_failure(e), sys) from e
        finally:
            self.pdf_backend.close(doc)

        return "\n".join(page_texts).strip()

    def _extract_page(self, doc: Any, index: int) -> str:
        page_number = index + 1
        embedded = (self.pdf_backend.page_text(doc, index) or "").strip()
        if len(embedded) > self.settings.min_page_text_chars:
            log.debug("Extracted text layer", page=page_number, chars=len(embedded))
            return embedded

        log.info("No substantial text layer, trying OCR", page=page_number)
        try:
            bitmap = self.pdf_backend.render_page(doc, index, self.settings.ocr_render_scale)
            ocr_text = self.ocr_adapter.ocr(bitmap)
        except Exception as e:
            # a failed page degrades to empty text, the remaining pages still run
            log.warning("OCR failed for page; skipping page", page=page_number, error=str(e))
            return ""

        ocr_text = (ocr_text or "").strip()
        if not ocr_text:
            log.info("OCR returned no text", page=page_number)
            return ""
        log.info("Extracted text via OCR", page=page_number, chars=len(ocr_text))
        return ocr_text

    async def _extract_image(self, document: UploadedDocument) -> str:
        try:
            with Image.open(io.BytesIO(document.content)) as img:
                img.load()
                bitmap = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, OSError) as e:
            log.error("Image could not be decoded", file=document.file_name, error=str(e))
            raise ExtractionError("Invalid image file. The file may be corrupted or not a supported image.", sys) from e

        try:
            text = await asyncio.to_thread(self.ocr_adapter.ocr, bitmap)
        except Exception as e:
            log.error("OCR failed for image", file=document.file_name, error=str(e))
            raise ExtractionError(f"Failed to extract text from image: {e}", sys) from e

        text = (text or "").strip()
        if not text:
            raise EmptyDocumentError("No text could be recognized in the image")
        log.info("Image text extracted", file=document.file_name, chars=len(text))
        return text

    @staticmethod
    def _describe_pdf_failure(error: Exception) -> str:
        if isinstance(error, PdfStructureError):
            return "Invalid PDF structure. The file may be corrupted or not a valid PDF."
        if isinstance(error, (ImportError, MemoryError)):
            return "Failed to load PDF engine. Please check the installation and try again."
        message = str(error)
        if message:
            return f"Failed to extract text from PDF: {message}"
        return "Failed to extract text from PDF due to an unknown error."
