"""
Document analysis for Legal Analysis Core.
This module provides the DocumentAnalyzer class, which sends extracted document text to the
LLM and normalizes the reply into the canonical DocumentAnalysis shape.
"""
import sys
from typing import Any, Callable, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser

from exception.custom_exception import AnalysisServiceError
from logger import GLOBAL_LOGGER as log
from model.models import DocumentAnalysis, PromptType, Risk, RiskLevel
from prompt.prompt_library import PROMPT_REGISTRY
from utils.model_loader import ModelLoader


def strip_code_fences(text: str) -> str:
    """Remove a ```json ... ``` wrapper around an LLM reply."""
    cleaned = text.strip()
    if cleaned.startswith("```"):
        cleaned = cleaned.split("\n", 1)[1] if "\n" in cleaned else ""
        if cleaned.rstrip().endswith("```"):
            cleaned = cleaned.rstrip()[:-3]
    return cleaned.strip()


def unparsed_reply_analysis(reply: str) -> DocumentAnalysis:
    """Analysis built from an LLM reply that was not valid JSON."""
    summary = reply[:500] + ("..." if len(reply) > 500 else "")
    return DocumentAnalysis(
        summary=summary,
        document_type="Legal Document",
        key_points=["Document analysis completed", "Please review the full text for detailed information"],
        risks=[Risk(
            level=RiskLevel.MEDIUM,
            description="Unable to perform detailed risk analysis",
            recommendation="Manual review recommended",
        )],
    )


class DocumentAnalyzer:
    """
    Analyzes legal document text with an LLM and returns a DocumentAnalysis.
    """
    def __init__(self, llm: Optional[Any] = None) -> None:
        try:
            self.llm = llm if llm is not None else ModelLoader().load_llm()
            self.parser = JsonOutputParser(pydantic_object=DocumentAnalysis)
            self.prompt = PROMPT_REGISTRY[PromptType.DOCUMENT_ANALYSIS.value]
            self.chain = self.prompt | self.llm | StrOutputParser()
            log.info("DocumentAnalyzer initialized", model=type(self.llm).__name__)
        except Exception as e:
            log.error("Error initializing DocumentAnalyzer", error=str(e))
            raise AnalysisServiceError("Error in DocumentAnalyzer initialization", sys)

    async def analyze(self, text: str, file_name: str) -> DocumentAnalysis:
        """
        Analyze document text and return the structured result.
        Args:
            text (str): Extracted document text.
            file_name (str): Original file name, passed to the model for context.
        Returns:
            DocumentAnalysis: Normalized analysis. A reply that is not JSON yields a
            minimal analysis built from the raw reply text.
        Raises:
            AnalysisServiceError: The LLM call itself failed.
        """
        try:
            log.info("Invoking document analysis chain", file=file_name, chars=len(text))
            reply = await self.chain.ainvoke({
                "file_name": file_name or "Unknown Document",
                "document_text": text,
                "format_instructions": self.parser.get_format_instructions(),
            })
        except Exception as e:
            log.error("Document analysis call failed", file=file_name, error=str(e))
            raise AnalysisServiceError(f"Analysis failed: {e}", sys) from e

        return self.parse_reply(reply, file_name)

    def parse_reply(self, reply: str, file_name: str = "") -> DocumentAnalysis:
        try:
            payload = self.parser.parse(strip_code_fences(reply))
        except OutputParserException as e:
            log.warning("Analysis reply was not valid JSON; using raw reply", file=file_name, error=str(e))
            return unparsed_reply_analysis(reply)

        if not isinstance(payload, dict):
            log.warning("Analysis reply was not a JSON object", file=file_name, kind=type(payload).__name__)
            return unparsed_reply_analysis(reply)

        analysis = DocumentAnalysis.model_validate(payload)
        log.info(
            "Document analysis successful",
            file=file_name,
            risks=len(analysis.risks),
            clauses=len(analysis.important_clauses),
            deadlines=len(analysis.deadlines),
        )
        return analysis


class LazyDocumentAnalyzer:
    """
    Builds the DocumentAnalyzer on the first analyze call. A failed build raises
    AnalysisServiceError for that call and is retried on the next one.
    """
    def __init__(self, factory: Callable[[], DocumentAnalyzer] = DocumentAnalyzer) -> None:
        self._factory = factory
        self._analyzer: Optional[DocumentAnalyzer] = None

    async def analyze(self, text: str, file_name: str) -> DocumentAnalysis:
        if self._analyzer is None:
            self._analyzer = self._factory()
        return await self._analyzer.analyze(text, file_name)
