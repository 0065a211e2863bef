"""
Pydantic models shared by the analysis core, the prompts and the API.

External JSON (LLM replies, API payloads, stored records) uses camelCase keys;
Python code uses snake_case attributes. ``by_alias=True`` on dump gives the
external shape back.
"""
import uuid
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = _text(value).strip()
    return value or None


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class _FrozenCamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# --- Structured analysis ---

class RiskLevel(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def lookup(cls, value: Any) -> Optional["RiskLevel"]:
        """Case-insensitive match on the level name; None when nothing matches."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        return None

    @classmethod
    def coerce(cls, value: Any) -> "RiskLevel":
        """Map any value onto the enum; unknown values count as Medium."""
        return cls.lookup(value) or cls.MEDIUM


class Risk(_FrozenCamelModel):
    level: RiskLevel = RiskLevel.MEDIUM
    description: str = ""
    recommendation: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> RiskLevel:
        return RiskLevel.coerce(value)

    @field_validator("description", "recommendation", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text(value)


class Obligation(_FrozenCamelModel):
    party: str = ""
    description: str = ""
    deadline: Optional[str] = None

    @field_validator("party", "description", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("deadline", mode="before")
    @classmethod
    def _coerce_deadline(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


class Clause(_FrozenCamelModel):
    title: str = ""
    content: str = ""
    importance: str = ""

    @field_validator("title", "content", "importance", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text(value)


class Deadline(_FrozenCamelModel):
    description: str = ""
    date: Optional[str] = None
    consequence: str = ""

    @field_validator("description", "consequence", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _text(value)

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Optional[str]:
        return _optional_text(value)


class DocumentAnalysis(_FrozenCamelModel):
    """Canonical structured result of a document analysis.

    Tolerates malformed analyzer output: missing lists become empty, bare
    strings in ``risks`` become risk descriptions, unknown risk levels become
    Medium. Item order is kept as returned.
    """
    summary: str = ""
    document_type: str = "Legal Document"
    key_points: Tuple[str, ...] = ()
    risks: Tuple[Risk, ...] = ()
    obligations: Tuple[Obligation, ...] = ()
    important_clauses: Tuple[Clause, ...] = ()
    deadlines: Tuple[Deadline, ...] = ()

    @field_validator("summary", mode="before")
    @classmethod
    def _coerce_summary(cls, value: Any) -> str:
        return _text(value)

    @field_validator("document_type", mode="before")
    @classmethod
    def _coerce_document_type(cls, value: Any) -> str:
        return _text(value).strip() or "Legal Document"

    @field_validator("key_points", mode="before")
    @classmethod
    def _coerce_key_points(cls, value: Any) -> list:
        return [_text(point) for point in _as_list(value) if point is not None]

    @field_validator("risks", mode="before")
    @classmethod
    def _coerce_risks(cls, value: Any) -> list:
        items = []
        for item in _as_list(value):
            if isinstance(item, str):
                item = {"description": item}
            if isinstance(item, (dict, Risk)):
                items.append(item)
        return items

    @field_validator("obligations", "important_clauses", "deadlines", mode="before")
    @classmethod
    def _coerce_records(cls, value: Any) -> list:
        return [item for item in _as_list(value) if isinstance(item, (dict, BaseModel))]

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# --- Upload lifecycle ---

class UploadStatus(str, Enum):
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class UploadedDocument(BaseModel):
    """An uploaded file as handed to the extractor."""
    file_name: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def suffix(self) -> str:
        name = self.file_name.lower()
        return name[name.rfind("."):] if "." in name else ""

    @property
    def size(self) -> int:
        return len(self.content)


class UploadState(_CamelModel):
    """Progress of one upload; terminal once completed or errored."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, validate_assignment=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex[:9])
    file_name: str
    status: UploadStatus = UploadStatus.UPLOADING
    progress: int = Field(default=0, ge=0, le=100)
    error: Optional[str] = None
    result_ref: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in (UploadStatus.COMPLETED, UploadStatus.ERROR)

    def advance(self, progress: int, status: Optional[UploadStatus] = None) -> None:
        if self.is_terminal:
            raise ValueError(f"Upload {self.id} already finished with status {self.status.value}")
        if status is not None:
            self.status = status
        self.progress = progress

    def complete(self, result_ref: str) -> None:
        self.advance(100, UploadStatus.COMPLETED)
        self.result_ref = result_ref

    def fail(self, error: str) -> None:
        if self.is_terminal:
            raise ValueError(f"Upload {self.id} already finished with status {self.status.value}")
        self.status = UploadStatus.ERROR
        self.error = error


# --- Derived metrics ---

class CategoryScores(_FrozenCamelModel):
    legal: int = Field(ge=0, le=100)
    financial: int = Field(ge=0, le=100)
    compliance: int = Field(ge=0, le=100)
    operational: int = Field(ge=0, le=100)


class HealthScore(_FrozenCamelModel):
    overall: int = Field(ge=0, le=100)
    categories: CategoryScores
    label: str
    risk_counts: Dict[str, int]


class EventType(str, Enum):
    DEADLINE = "deadline"
    OBLIGATION = "obligation"


class TimelineEvent(_FrozenCamelModel):
    type: EventType
    title: str
    date: str
    consequence: str
    priority: str
    days_until: Optional[int] = None
    urgency_label: str = "Date TBD"
    urgency_color: str = "gray-500"


class NegotiationStrategy(_FrozenCamelModel):
    risk_title: str
    risk_level: RiskLevel
    current_issue: str
    counter_proposal: str
    talking_points: Tuple[str, ...]
    leverage_score: int = Field(ge=0, le=100)
    rationale: str
    fallback_position: str


class ClauseRating(str, Enum):
    BETTER = "better"
    STANDARD = "standard"
    WORSE = "worse"


class IndustryStandard(_FrozenCamelModel):
    name: str
    rating: ClauseRating
    best_practice: str
    improvements: Tuple[str, ...]


class RatedClause(_FrozenCamelModel):
    title: str
    content: str
    importance: str
    rating: ClauseRating
    matched_standard: Optional[IndustryStandard] = None
    index: int


class BenchmarkReport(_FrozenCamelModel):
    clauses: Tuple[RatedClause, ...]
    counts: Dict[str, int]


# --- Comparison ---

class DocumentInput(_CamelModel):
    name: str
    analysis: DocumentAnalysis


class KeyDifference(_CamelModel):
    category: str = "General"
    difference: str = ""
    document1_value: str = ""
    document2_value: str = ""
    impact: str = "Medium"
    recommendation: str = ""


class Similarity(_CamelModel):
    category: str = ""
    description: str = ""
    significance: str = ""


class RiskComparison(_CamelModel):
    document1_risks: List[str] = Field(default_factory=list)
    document2_risks: List[str] = Field(default_factory=list)
    additional_risks_in_doc1: List[str] = Field(default_factory=list)
    additional_risks_in_doc2: List[str] = Field(default_factory=list)
    risk_assessment: str = ""


class TermComparison(_CamelModel):
    favorable_to_party1: List[str] = Field(default_factory=list)
    favorable_to_party2: List[str] = Field(default_factory=list)
    neutral: List[str] = Field(default_factory=list)


class Recommendation(_CamelModel):
    priority: str = "Medium"
    action: str = ""
    rationale: str = ""
    target_document: str = "Both"


class NegotiationPoint(_CamelModel):
    clause: str = ""
    current_status: str = ""
    suggested_approach: str = ""


class ComparisonMetadata(_CamelModel):
    document1_name: str
    document2_name: str
    comparison_date: str
    document_types: Dict[str, str]


class ComparisonResult(_CamelModel):
    executive_summary: str = ""
    overall_similarity: str = "Medium"
    key_differences: List[KeyDifference] = Field(default_factory=list)
    similarities: List[Similarity] = Field(default_factory=list)
    risk_comparison: RiskComparison = Field(default_factory=RiskComparison)
    term_comparison: TermComparison = Field(default_factory=TermComparison)
    recommendations: List[Recommendation] = Field(default_factory=list)
    negotiation_points: List[NegotiationPoint] = Field(default_factory=list)
    metadata: Optional[ComparisonMetadata] = None


# --- Persistence ---

class AnalysisRecord(_CamelModel):
    id: str
    file_name: str
    upload_date: str
    last_accessed: str
    user_id: Optional[str] = None
    document_type: str = "Legal Document"
    tags: List[str] = Field(default_factory=list)
    risk_level: RiskLevel = RiskLevel.LOW
    has_deadlines: bool = False
    text_length: int = 0
    engine: str = "llm"
    analysis: DocumentAnalysis


# --- Config / prompts ---

class PipelineSettings(BaseModel):
    """Policy values for extraction, timeouts and uploads."""
    min_page_text_chars: int = 10
    min_document_chars: int = 50
    ocr_render_scale: float = 2.0
    ocr_language: str = "eng"
    ocr_psm: int = 1
    extraction_timeout: float = 30.0
    analysis_timeout: float = 60.0
    max_upload_bytes: int = 10 * 1024 * 1024
    allowed_content_types: List[str] = Field(
        default_factory=lambda: ["application/pdf", "text/plain", "image/png", "image/jpeg", "image/tiff"]
    )
    store_path: str = "data/analyses.json"


class PromptType(str, Enum):
    DOCUMENT_ANALYSIS = "document_analysis"
    DOCUMENT_COMPARISON = "document_comparison"
