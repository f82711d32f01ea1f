# API package - FastAPI components
# The router lives in api.routes and is imported by main.py directly
from .models import (
    AnalyzeRequest,
    BacklogItem,
    ContentAuditItem,
    CopyAugmentRequest,
    CopyExampleRequest,
    CopyRow,
    Finding,
    PdfRequest,
    Report,
    Screenshots,
)

__all__ = [
    "AnalyzeRequest",
    "BacklogItem",
    "ContentAuditItem",
    "CopyAugmentRequest",
    "CopyExampleRequest",
    "CopyRow",
    "Finding",
    "PdfRequest",
    "Report",
    "Screenshots",
]
