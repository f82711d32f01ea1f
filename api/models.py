from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field

Impact = Literal["high", "medium", "low"]
Effort = Literal["low", "medium", "high"]
AuditStatus = Literal["ok", "weak", "missing"]
Mode = Literal["free", "full"]


# Report models
class Finding(BaseModel):
    title: str
    impact: Impact
    recommendation: str = ""


class ContentAuditItem(BaseModel):
    section: str
    status: AuditStatus
    rationale: str = ""
    suggestions: List[str] = Field(default_factory=list)


class BacklogItem(BaseModel):
    title: str
    impact: Impact
    effort: Effort = "medium"
    eta_days: int = Field(default=3, ge=1, le=30)
    lift_percent: Optional[int] = Field(default=None, ge=1, le=50)
    notes: Optional[str] = None


class Screenshots(BaseModel):
    hero: Optional[str] = None


class Report(BaseModel):
    url: str
    title: Optional[str] = None
    score: int = Field(ge=0, le=100)
    grade: str
    summary: str = ""
    key_findings: List[Finding] = Field(default_factory=list)
    quick_wins: List[str] = Field(default_factory=list)
    prioritized_backlog: List[BacklogItem] = Field(default_factory=list)
    content_audit: List[ContentAuditItem] = Field(default_factory=list)
    screenshots: Screenshots = Field(default_factory=Screenshots)
    sections_detected: Dict[str, bool] = Field(default_factory=dict)
    uplift_percent: int = 0
    model: str
    mode: Mode = "free"
    analyzed_at: str


# Request models
class AnalyzeRequest(BaseModel):
    url: str = ""
    mode: str = "free"


class CopyMeta(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None


class CopyAugmentRequest(BaseModel):
    url: str
    meta: Optional[CopyMeta] = None


class CopyRow(BaseModel):
    field: str
    current: str = ""
    recommended: str
    priority: Literal["low", "med", "high"] = "med"
    lift_percent: int = Field(default=0, ge=0, le=12)


class CopyAugmentResponse(BaseModel):
    ok: bool = True
    rows: List[CopyRow]


class CopyExampleRequest(BaseModel):
    field: Optional[str] = None
    current: str
    recommended: str
    url: Optional[str] = None
    title: Optional[str] = None
    meta_description: Optional[str] = None
    audience_hint: Optional[str] = None


class PdfRequest(BaseModel):
    report: Optional[Dict] = None
    email: Optional[str] = None
