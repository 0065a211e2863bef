"""
OCR fallback adapter for Legal Analysis Core.
Wraps Tesseract behind a uniform ``bitmap -> text`` contract so the text
extractor can route image-only PDF pages and scanned uploads through it.
"""
import re
import sys
from typing import Protocol, Union

import cv2
import numpy as np
import pytesseract
from PIL import Image

from exception.custom_exception import OcrError
from logger import GLOBAL_LOGGER as log

Bitmap = Union[Image.Image, np.ndarray]

# spaced-out URL schemes, e.g. "h t t p s : / /"
_SPLIT_URL = re.compile(r"h\s*t\s*t\s*p\s*(s?)\s*:\s*/\s*/", re.IGNORECASE)
_MULTI_SPACE = re.compile(r"[ \t]{2,}")
_MULTI_BLANK_LINES = re.compile(r"\n{3,}")


class OcrAdapter(Protocol):
    def ocr(self, bitmap: Bitmap) -> str:
        ...


class TesseractOcr:
    """
    Tesseract-backed OCR. Each call is independent; failures raise OcrError.
    """
    def __init__(self, language: str = "eng", psm: int = 1, max_width: int = 2500) -> None:
        self.language = language
        self.psm = psm
        self.max_width = max_width

    def ocr(self, bitmap: Bitmap) -> str:
        """
        Recognize the text in a rendered page or scanned image.
        Args:
            bitmap: PIL image or BGR/grayscale numpy array.
        Returns:
            str: Cleaned OCR text (may be empty for blank pages).
        """
        try:
            image = self._to_array(bitmap)
            prepared = self._preprocess(image)
            config = f"--psm {self.psm} -c preserve_interword_spaces=1"
            raw = pytesseract.image_to_string(prepared, lang=self.language, config=config)
        except Exception as e:
            log.error("Tesseract OCR failed", error=str(e))
            raise OcrError("OCR text extraction failed", sys)

        text = self.postprocess(raw)
        log.debug("OCR completed", chars=len(text))
        return text

    def _to_array(self, bitmap: Bitmap) -> np.ndarray:
        if isinstance(bitmap, np.ndarray):
            return bitmap
        if isinstance(bitmap, Image.Image):
            rgb = bitmap.convert("RGB")
            return cv2.cvtColor(np.array(rgb), cv2.COLOR_RGB2BGR)
        raise OcrError(f"Unsupported bitmap type: {type(bitmap).__name__}")

    def _preprocess(self, img: np.ndarray) -> np.ndarray:
        """
        Grayscale + CLAHE + Otsu threshold. Large renders are scaled down first,
        the 2x page renders are already well above Tesseract's useful resolution.
        """
        try:
            h, w = img.shape[:2]
            if w > self.max_width:
                scale = self.max_width / w
                img = cv2.resize(img, None, fx=scale, fy=scale, interpolation=cv2.INTER_AREA)

            gray = img if img.ndim == 2 else cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
            clahe = cv2.createCLAHE(clipLimit=2.0, tileGridSize=(8, 8))
            gray = clahe.apply(gray)
            _, thresh = cv2.threshold(gray, 0, 255, cv2.THRESH_BINARY + cv2.THRESH_OTSU)
            return thresh
        except cv2.error as e:
            log.warning("OCR preprocessing failed, using original image", error=str(e))
            return img

    @staticmethod
    def postprocess(text: str) -> str:
        """Fix common OCR artefacts: split URL schemes and runs of spaces."""
        text = _SPLIT_URL.sub(lambda m: "https://" if m.group(1) else "http://", text)
        text = _MULTI_SPACE.sub(" ", text)
        text = _MULTI_BLANK_LINES.sub("\n\n", text)
        return text.strip()
