"""
Document comparison for Legal Analysis Core.
This module provides the Comparator class, which hands two finished analyses to the LLM and
normalizes the structured diff it returns (differences, risk and term comparison, recommendations).
"""
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser, StrOutputParser

from exception.custom_exception import AnalysisServiceError
from legal_analysis_core.analyzer import strip_code_fences
from logger import GLOBAL_LOGGER as log
from model.models import (
    ComparisonMetadata,
    ComparisonResult,
    DocumentInput,
    KeyDifference,
    NegotiationPoint,
    PromptType,
    Recommendation,
    RiskComparison,
    Similarity,
    TermComparison,
)
from prompt.prompt_library import PROMPT_REGISTRY
from utils.model_loader import ModelLoader


class Comparator:
    """
    Compares two analyzed documents using the LLM and returns a ComparisonResult.
    """
    def __init__(self, llm: Optional[Any] = None) -> None:
        try:
            self.llm = llm if llm is not None else ModelLoader().load_llm()
            self.parser = JsonOutputParser(pydantic_object=ComparisonResult)
            self.prompt = PROMPT_REGISTRY[PromptType.DOCUMENT_COMPARISON.value]
            self.chain = self.prompt | self.llm | StrOutputParser()
            log.info("Comparator initialized", model=type(self.llm).__name__)
        except Exception as e:
            log.error("Error initializing Comparator", error=str(e))
            raise AnalysisServiceError("Error in Comparator initialization", sys)

    async def compare(self, document1: DocumentInput, document2: DocumentInput) -> ComparisonResult:
        """
        Compare two analyzed documents.
        Args:
            document1 (DocumentInput): Name and analysis of the first document.
            document2 (DocumentInput): Name and analysis of the second document.
        Returns:
            ComparisonResult: Structured comparison with metadata about both inputs.
        """
        inputs = {
            "document1_name": document1.name,
            "document1_analysis": json.dumps(document1.analysis.to_payload(), indent=2),
            "document2_name": document2.name,
            "document2_analysis": json.dumps(document2.analysis.to_payload(), indent=2),
        }
        try:
            log.info("Invoking document comparison chain", document1=document1.name, document2=document2.name)
            reply = await self.chain.ainvoke(inputs)
            log.info("Chain invoked successfully", response_preview=reply[:200])
        except Exception as e:
            log.error("Error in compare", error=str(e))
            raise AnalysisServiceError("Error comparing documents", sys) from e

        result = self._format_response(reply, document1, document2)
        result.metadata = ComparisonMetadata(
            document1_name=document1.name,
            document2_name=document2.name,
            comparison_date=datetime.now(timezone.utc).isoformat(),
            document_types={
                "document1": document1.analysis.document_type,
                "document2": document2.analysis.document_type,
            },
        )
        return result

    def _format_response(self, reply: str, document1: DocumentInput, document2: DocumentInput) -> ComparisonResult:
        try:
            payload = self.parser.parse(strip_code_fences(reply))
            if isinstance(payload, dict):
                payload.pop("metadata", None)
                return ComparisonResult.model_validate(payload)
            log.warning("Comparison reply was not a JSON object", kind=type(payload).__name__)
        except (OutputParserException, ValueError) as e:
            log.warning("Comparison reply could not be parsed; using fallback structure", error=str(e))
        return self._fallback_result(reply, document1, document2)

    @staticmethod
    def _fallback_result(reply: str, document1: DocumentInput, document2: DocumentInput) -> ComparisonResult:
        return ComparisonResult(
            executive_summary=reply[:500] + ("..." if len(reply) > 500 else ""),
            overall_similarity="Medium",
            key_differences=[KeyDifference(
                category="General",
                difference="Detailed comparison analysis was provided in text format",
                document1_value="See document 1 analysis",
                document2_value="See document 2 analysis",
                impact="Medium",
                recommendation="Review the detailed analysis for specific differences",
            )],
            similarities=[Similarity(
                category="Document Type",
                description="Both documents are legal agreements",
                significance="Similar structural elements present",
            )],
            risk_comparison=RiskComparison(
                document1_risks=[risk.description for risk in document1.analysis.risks],
                document2_risks=[risk.description for risk in document2.analysis.risks],
                risk_assessment="Manual review required for detailed risk comparison",
            ),
            term_comparison=TermComparison(neutral=["Terms require detailed legal review"]),
            recommendations=[Recommendation(
                priority="High",
                action="Conduct detailed manual review of both documents",
                rationale="Automated comparison completed, legal expert review recommended",
                target_document="Both",
            )],
            negotiation_points=[NegotiationPoint(
                clause="Key Terms",
                current_status="Differences identified between documents",
                suggested_approach="Focus on critical terms and risk areas",
            )],
        )
