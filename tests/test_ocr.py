"""
Unit tests for the Tesseract OCR adapter.
"""
from unittest.mock import patch

import numpy as np
import pytest
from PIL import Image

from exception.custom_exception import OcrError
from legal_analysis_core.ocr import TesseractOcr


def test_postprocess_fixes_split_urls_and_spacing():
    raw = "Visit h t t p s : / /example.com   for   terms\n\n\n\nSigned  "
    assert TesseractOcr.postprocess(raw) == "Visit https://example.com for terms\n\nSigned"


@patch("legal_analysis_core.ocr.pytesseract.image_to_string")
def test_ocr_passes_language_and_page_mode(mock_tesseract):
    mock_tesseract.return_value = "  Lease   Agreement \n"
    adapter = TesseractOcr(language="eng", psm=6)

    text = adapter.ocr(Image.new("RGB", (200, 100), "white"))

    assert text == "Lease Agreement"
    _, kwargs = mock_tesseract.call_args
    assert kwargs["lang"] == "eng"
    assert "--psm 6" in kwargs["config"]


@patch("legal_analysis_core.ocr.pytesseract.image_to_string")
def test_large_images_are_scaled_down(mock_tesseract):
    mock_tesseract.return_value = ""
    adapter = TesseractOcr(max_width=500)

    adapter.ocr(np.full((400, 1000, 3), 255, dtype=np.uint8))

    prepared = mock_tesseract.call_args[0][0]
    assert prepared.shape[1] == 500
    assert prepared.ndim == 2


@patch("legal_analysis_core.ocr.pytesseract.image_to_string")
def test_tesseract_failure_raises_ocr_error(mock_tesseract):
    mock_tesseract.side_effect = RuntimeError("tesseract is not installed")
    with pytest.raises(OcrError):
        TesseractOcr().ocr(Image.new("RGB", (50, 50), "white"))
