"""
Configuration loading for the legal document analyzer.

Policy values (extraction thresholds, stage timeouts, upload limits, LLM
settings) live in ``config/config.yaml``; a handful can be overridden through
environment variables so deployments do not need to ship a different file.
"""
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from dotenv import load_dotenv

from logger import GLOBAL_LOGGER as log
from model.models import PipelineSettings

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "config.yaml"

# env var -> (section, key, caster)
_ENV_OVERRIDES = {
    "EXTRACTION_TIMEOUT": ("timeouts", "extraction_seconds", float),
    "ANALYSIS_TIMEOUT": ("timeouts", "analysis_seconds", float),
    "MIN_PAGE_TEXT_CHARS": ("extraction", "min_page_text_chars", int),
    "MIN_DOCUMENT_CHARS": ("extraction", "min_document_chars", int),
    "OCR_RENDER_SCALE": ("extraction", "ocr_render_scale", float),
    "MAX_UPLOAD_BYTES": ("upload", "max_bytes", int),
    "ANALYSIS_STORE_PATH": ("storage", "path", str),
}


def load_config(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Load the YAML config and apply environment overrides."""
    load_dotenv()
    path = Path(config_path or os.getenv("CONFIG_PATH") or DEFAULT_CONFIG_PATH)
    config: Dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    else:
        log.warning("Config file not found, using built-in defaults", path=str(path))

    for env_name, (section, key, caster) in _ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if raw is None or raw == "":
            continue
        try:
            config.setdefault(section, {})[key] = caster(raw)
        except ValueError:
            log.warning("Ignoring invalid config override", env=env_name, value=raw)
    return config


def load_settings(config_path: Optional[Union[str, Path]] = None) -> PipelineSettings:
    """Build the pipeline policy values from the loaded config."""
    config = load_config(config_path)
    extraction = config.get("extraction", {})
    timeouts = config.get("timeouts", {})
    upload = config.get("upload", {})
    storage = config.get("storage", {})

    values: Dict[str, Any] = {
        "min_page_text_chars": extraction.get("min_page_text_chars"),
        "min_document_chars": extraction.get("min_document_chars"),
        "ocr_render_scale": extraction.get("ocr_render_scale"),
        "ocr_language": extraction.get("ocr_language"),
        "ocr_psm": extraction.get("ocr_psm"),
        "extraction_timeout": timeouts.get("extraction_seconds"),
        "analysis_timeout": timeouts.get("analysis_seconds"),
        "max_upload_bytes": upload.get("max_bytes"),
        "allowed_content_types": upload.get("allowed_types"),
        "store_path": storage.get("path"),
    }
    return PipelineSettings(**{k: v for k, v in values.items() if v is not None})
