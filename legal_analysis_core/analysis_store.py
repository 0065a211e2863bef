"""
Analysis persistence module.
Stores completed analyses keyed by an opaque analysis id in a JSON file
(simple key-value record store: get / set / delete / list).
"""
import json
import os
import sys
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from exception.custom_exception import StorageError
from logger import GLOBAL_LOGGER as log
from model.models import AnalysisRecord, DocumentAnalysis, RiskLevel

MAX_TAGS = 5

# (tag, keywords) checked against the lower-cased document text
_CONTENT_TAGS = [
    ("Contract", ("contract", "agreement")),
    ("Employment", ("employment", "employee")),
    ("Real Estate", ("rental", "lease")),
    ("IP", ("intellectual property", "patent", "trademark")),
    ("Confidential", ("confidential", "nda")),
]


def overall_risk_level(analysis: DocumentAnalysis) -> RiskLevel:
    levels = {risk.level for risk in analysis.risks}
    if RiskLevel.HIGH in levels:
        return RiskLevel.HIGH
    if RiskLevel.MEDIUM in levels:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def document_tags(analysis: DocumentAnalysis, text: str = "") -> List[str]:
    """Tags for listing/searching: type, risk band, deadlines, content keywords."""
    tags = []
    if analysis.document_type:
        tags.append(analysis.document_type)
    if analysis.risks:
        tags.append(f"{overall_risk_level(analysis).value} Risk")
    if analysis.deadlines:
        tags.append("Has Deadlines")

    content = text.lower()
    for tag, keywords in _CONTENT_TAGS:
        if any(keyword in content for keyword in keywords):
            tags.append(tag)

    # dedupe, keep first occurrence
    return list(dict.fromkeys(tags))[:MAX_TAGS]


class AnalysisStore:
    def __init__(self, storage_path: str = "data/analyses.json"):
        self.storage_path = storage_path
        self.lock = Lock()
        self._ensure_storage()
        self.records: Dict[str, Dict[str, Any]] = self._load()

    def _ensure_storage(self):
        directory = os.path.dirname(self.storage_path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        if not os.path.exists(self.storage_path):
            with open(self.storage_path, 'w') as f:
                json.dump({}, f)

    def _load(self) -> Dict[str, Dict[str, Any]]:
        try:
            with open(self.storage_path, 'r') as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            log.error("Failed to load analysis store", path=self.storage_path, error=str(e))
            return {}

    def _save(self, records: Dict[str, Dict[str, Any]]):
        try:
            with open(self.storage_path, 'w') as f:
                json.dump(records, f, indent=2)
        except OSError as e:
            log.error("Failed to save analysis store", path=self.storage_path, error=str(e))
            raise StorageError("Failed to save analysis record", sys)

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        """Return the stored record, touching its last-accessed time."""
        with self.lock:
            raw = self.records.get(analysis_id)
            if raw is None:
                return None
            raw["lastAccessed"] = _now()
        return AnalysisRecord.model_validate(raw)

    # writes go to a copy; self.records only changes once the file is written
    def set(self, analysis_id: str, record: AnalysisRecord) -> None:
        with self.lock:
            updated = {**self.records, analysis_id: record.model_dump(by_alias=True, mode="json")}
            self._save(updated)
            self.records = updated
        log.info("Analysis record saved", analysis_id=analysis_id)

    def delete(self, analysis_id: str) -> bool:
        with self.lock:
            if analysis_id not in self.records:
                return False
            updated = {key: value for key, value in self.records.items() if key != analysis_id}
            self._save(updated)
            self.records = updated
        log.info("Analysis record deleted", analysis_id=analysis_id)
        return True

    def list(
        self,
        user_id: Optional[str] = None,
        risk_level: Optional[RiskLevel] = None,
        predicate: Optional[Callable[[AnalysisRecord], bool]] = None,
    ) -> List[AnalysisRecord]:
        """Records matching every given filter, newest upload first."""
        with self.lock:
            snapshot = list(self.records.values())
        records = [AnalysisRecord.model_validate(raw) for raw in snapshot]
        if user_id is not None:
            records = [r for r in records if r.user_id == user_id]
        if risk_level is not None:
            records = [r for r in records if r.risk_level == risk_level]
        if predicate is not None:
            records = [r for r in records if predicate(r)]
        return sorted(records, key=lambda r: r.upload_date, reverse=True)

    def save_analysis(
        self,
        analysis_id: str,
        file_name: str,
        analysis: DocumentAnalysis,
        text: str = "",
        user_id: Optional[str] = None,
        engine: str = "llm",
    ) -> AnalysisRecord:
        """Build the record for a completed analysis and store it."""
        now = _now()
        record = AnalysisRecord(
            id=analysis_id,
            file_name=file_name,
            upload_date=now,
            last_accessed=now,
            user_id=user_id,
            document_type=analysis.document_type,
            tags=document_tags(analysis, text),
            risk_level=overall_risk_level(analysis),
            has_deadlines=bool(analysis.deadlines),
            text_length=len(text),
            engine=engine,
            analysis=analysis,
        )
        self.set(analysis_id, record)
        return record


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
