"""
Prompt templates for the LLM-backed analysis and comparison chains.
"""
from langchain_core.prompts import ChatPromptTemplate

from model.models import PromptType

document_analysis_prompt = ChatPromptTemplate.from_template("""
You are a highly skilled legal AI assistant specializing in document analysis.
Analyze the following legal document and return a comprehensive analysis as JSON.

Document Name: {file_name}
Document Content:
{document_text}

Return JSON with exactly these keys:
- "summary": a 2-3 paragraph executive summary of the document
- "documentType": the specific type of legal document (Contract, Agreement, Policy, Terms of Service, ...)
- "keyPoints": the 5-8 most important points
- "risks": list of {{"level": "High" | "Medium" | "Low", "description": ..., "recommendation": ...}}
- "obligations": list of {{"party": ..., "description": ..., "deadline": specific deadline if mentioned}}
- "importantClauses": list of {{"title": ..., "content": ..., "importance": ...}}
- "deadlines": list of {{"description": ..., "date": specific date (YYYY-MM-DD) if mentioned, "consequence": ...}}

Guidelines:
1. Focus on legal implications and practical considerations.
2. Give every risk an actionable recommendation.
3. Extract all relevant dates, deadlines and obligations.
4. Use empty lists for empty sections but keep every key.
5. Risk levels must be exactly "High", "Medium" or "Low".

{format_instructions}

Respond with the JSON object only.
""")

document_comparison_prompt = ChatPromptTemplate.from_template("""
You are a legal expert comparing two documents that were already analyzed.

DOCUMENT 1: "{document1_name}"
Analysis:
{document1_analysis}

DOCUMENT 2: "{document2_name}"
Analysis:
{document2_analysis}

Return a JSON object with these keys:
- "executiveSummary": 2-3 paragraphs on key differences and similarities
- "overallSimilarity": "High" | "Medium" | "Low"
- "keyDifferences": list of {{"category": "Risk Levels|Terms|Obligations|Clauses|Deadlines", "difference": ..., "document1Value": ..., "document2Value": ..., "impact": "High|Medium|Low", "recommendation": ...}}
- "similarities": list of {{"category": ..., "description": ..., "significance": ...}}
- "riskComparison": {{"document1Risks": [...], "document2Risks": [...], "additionalRisksInDoc1": [...], "additionalRisksInDoc2": [...], "riskAssessment": ...}}
- "termComparison": {{"favorableToParty1": [...], "favorableToParty2": [...], "neutral": [...]}}
- "recommendations": list of {{"priority": "High|Medium|Low", "action": ..., "rationale": ..., "targetDocument": "Document 1|Document 2|Both"}}
- "negotiationPoints": list of {{"clause": ..., "currentStatus": ..., "suggestedApproach": ...}}

Focus on practical legal implications and actionable insights.
Respond with the JSON object only.
""")

PROMPT_REGISTRY = {
    PromptType.DOCUMENT_ANALYSIS.value: document_analysis_prompt,
    PromptType.DOCUMENT_COMPARISON.value: document_comparison_prompt,
}
