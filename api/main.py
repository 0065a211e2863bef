from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from exception.custom_exception import AnalysisServiceError, StorageError
from legal_analysis_core import benchmark as clause_benchmark
from legal_analysis_core import health_score, negotiation, timeline
from legal_analysis_core.analysis_store import AnalysisStore
from legal_analysis_core.analyzer import LazyDocumentAnalyzer
from legal_analysis_core.comparator import Comparator
from legal_analysis_core.extractor import TextExtractor
from legal_analysis_core.orchestrator import AnalysisOrchestrator
from logger import GLOBAL_LOGGER as log
from model.models import AnalysisRecord, DocumentInput, PipelineSettings, RiskLevel, UploadedDocument
from utils.config_loader import load_settings

app = FastAPI(title="Legal Document Analyzer API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allows all origins (for development)
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Services are built on first use so importing the app does not need API keys
@lru_cache
def get_settings() -> PipelineSettings:
    return load_settings()


@lru_cache
def get_store() -> AnalysisStore:
    return AnalysisStore(get_settings().store_path)


@lru_cache
def get_extractor() -> TextExtractor:
    return TextExtractor(settings=get_settings())


@lru_cache
def get_orchestrator() -> AnalysisOrchestrator:
    return AnalysisOrchestrator(get_extractor(), LazyDocumentAnalyzer(), store=get_store(), settings=get_settings())


@lru_cache
def get_comparator() -> Comparator:
    return Comparator()


class CompareRequest(BaseModel):
    document1: DocumentInput
    document2: DocumentInput


def _load_record(analysis_id: str, store: AnalysisStore) -> AnalysisRecord:
    record = store.get(analysis_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"Analysis {analysis_id} not found")
    return record


@app.get("/")
def health_check():
    return {"status": "ok", "service": "Legal Document Analyzer"}


@app.post("/analyze")
async def analyze_document(
    file: UploadFile = File(...),
    user_id: Optional[str] = Form(None),
    settings: PipelineSettings = Depends(get_settings),
    extractor: TextExtractor = Depends(get_extractor),
    orchestrator: AnalysisOrchestrator = Depends(get_orchestrator),
):
    """
    Uploads one document, runs extraction and analysis, and stores the result.
    Extraction and analysis failures still return a (degraded) analysis.
    """
    content = await file.read()
    if len(content) > settings.max_upload_bytes:
        log.warning("Upload rejected, file too large", file=file.filename, size=len(content))
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)}MB",
        )

    document = UploadedDocument(
        file_name=file.filename or "document",
        content=content,
        content_type=file.content_type,
    )
    content_type = (file.content_type or "").split(";")[0].strip().lower()
    declared_ok = content_type in ("", "application/octet-stream") or content_type in settings.allowed_content_types
    if extractor.detect_kind(document) == "unsupported" or not declared_ok:
        log.warning("Upload rejected, unsupported type", file=document.file_name, content_type=file.content_type)
        raise HTTPException(
            status_code=415,
            detail="Unsupported file type. Please upload PDF, text or image files.",
        )

    try:
        state, analysis = await orchestrator.process_upload(document, user_id=user_id)
    except Exception as e:
        log.error("Document analysis failed", file=document.file_name, error=str(e))
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "upload": state.model_dump(by_alias=True, mode="json"),
        "analysis": analysis.to_payload(),
    }


@app.get("/analysis/{analysis_id}")
def get_analysis(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    return record.model_dump(by_alias=True, mode="json")


@app.delete("/analysis/{analysis_id}")
def delete_analysis(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    try:
        deleted = store.delete(analysis_id)
    except StorageError as e:
        log.error("Delete failed", analysis_id=analysis_id, error=str(e))
        raise HTTPException(status_code=500, detail=e.error_message)
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Analysis {analysis_id} not found")
    return {"deleted": analysis_id}


@app.get("/documents")
def list_documents(
    user_id: Optional[str] = None,
    risk_level: Optional[str] = None,
    store: AnalysisStore = Depends(get_store),
):
    """Stored analyses, newest first, optionally filtered by user and overall risk level."""
    level = None
    if risk_level:
        level = RiskLevel.lookup(risk_level)
        if level is None:
            raise HTTPException(
                status_code=422,
                detail=f"Invalid risk_level '{risk_level}'. Expected one of: High, Medium, Low",
            )
    records = store.list(user_id=user_id, risk_level=level)
    return {
        "count": len(records),
        "documents": [
            record.model_dump(by_alias=True, mode="json", exclude={"analysis"})
            for record in records
        ],
    }


@app.get("/analysis/{analysis_id}/health")
def get_health_score(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    return health_score.score(record.analysis).model_dump(by_alias=True, mode="json")


@app.get("/analysis/{analysis_id}/timeline")
def get_timeline(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    events = timeline.build_timeline(record.analysis)
    return {"events": [event.model_dump(by_alias=True, mode="json") for event in events]}


@app.get("/analysis/{analysis_id}/timeline.ics")
def export_timeline(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    calendar = timeline.export_calendar(timeline.build_timeline(record.analysis))
    return Response(
        content=calendar,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{analysis_id}-deadlines.ics"'},
    )


@app.get("/analysis/{analysis_id}/negotiation")
def get_negotiation(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    strategies = negotiation.build_strategies(record.analysis)
    return {
        "summary": negotiation.leverage_summary(strategies),
        "strategies": [strategy.model_dump(by_alias=True, mode="json") for strategy in strategies],
    }


@app.get("/analysis/{analysis_id}/benchmark")
def get_benchmark(analysis_id: str, store: AnalysisStore = Depends(get_store)):
    record = _load_record(analysis_id, store)
    return clause_benchmark.benchmark(record.analysis).model_dump(by_alias=True, mode="json")


@app.post("/compare")
async def compare_documents(request: CompareRequest, comparator: Comparator = Depends(get_comparator)):
    """Compares two analyzed documents with the LLM."""
    try:
        result = await comparator.compare(request.document1, request.document2)
    except AnalysisServiceError as e:
        log.error("Comparison failed", error=str(e))
        raise HTTPException(status_code=502, detail=e.error_message)
    return result.model_dump(by_alias=True, mode="json")
