import logging

from logger import GLOBAL_LOGGER


def test_metadata_is_appended(caplog):
    with caplog.at_level(logging.INFO, logger="legal_analyzer"):
        GLOBAL_LOGGER.info("PDF loaded", pages=3)
    assert "PDF loaded | pages=3" in caplog.text


def test_bound_context_is_kept(caplog):
    upload_log = GLOBAL_LOGGER.bind(upload_id="abc")
    with caplog.at_level(logging.INFO, logger="legal_analyzer"):
        upload_log.warning("Upload failed", error="disk full")
        GLOBAL_LOGGER.info("Unrelated")
    assert "Upload failed | upload_id='abc', error='disk full'" in caplog.text
    assert "Unrelated | " not in caplog.text
