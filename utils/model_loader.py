"""
LLM loading for the analysis and comparison chains.
The provider is picked with LLM_PROVIDER (google by default).
"""
import os
import sys
from typing import Any, Dict, Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_groq import ChatGroq

from exception.custom_exception import LegalAnalyzerException
from logger import GLOBAL_LOGGER as log
from utils.config_loader import load_config


class ModelLoader:
    """Reads API keys from the environment and builds the configured chat model."""

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        self.config = config if config is not None else load_config()
        self.api_keys = {
            "google": os.getenv("GOOGLE_API_KEY") or os.getenv("GEMINI_API_KEY"),
            "groq": os.getenv("GROQ_API_KEY"),
        }

    def load_llm(self, provider: Optional[str] = None):
        provider = (provider or os.getenv("LLM_PROVIDER", "google")).lower()
        llm_block = self.config.get("llm", {})
        if provider not in llm_block:
            log.error("LLM provider not found in config", provider=provider)
            raise LegalAnalyzerException(f"LLM provider '{provider}' not found in config")

        llm_config = llm_block[provider]
        api_key = self.api_keys.get(provider)
        if not api_key:
            log.warning("API key missing for LLM provider; calls will fail", provider=provider)

        model_name = llm_config.get("model_name")
        temperature = llm_config.get("temperature", 0.3)
        max_tokens = llm_config.get("max_output_tokens", 8192)
        log.info("Loading LLM", provider=provider, model=model_name)

        try:
            if provider == "google":
                return ChatGoogleGenerativeAI(
                    model=model_name,
                    google_api_key=api_key,
                    temperature=temperature,
                    max_output_tokens=max_tokens,
                )
            if provider == "groq":
                return ChatGroq(
                    model=model_name,
                    api_key=api_key,
                    temperature=temperature,
                    max_tokens=max_tokens,
                )
        except Exception as e:
            log.error("Failed to initialise LLM", provider=provider, error=str(e))
            raise LegalAnalyzerException("Failed to load LLM", sys)

        raise LegalAnalyzerException(f"Unsupported LLM provider '{provider}'")
