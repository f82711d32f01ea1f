# Core package - analysis pipeline and the event-stream relay around it
from .pipeline import AnalysisPipeline, AnalysisState, PipelineResult, build_report
from .relay import AnalysisRelay, RelayConfig, RelayRun, RelayState

__all__ = [
    # Pipeline
    "AnalysisPipeline",
    "AnalysisState",
    "PipelineResult",
    "build_report",
    # Relay
    "AnalysisRelay",
    "RelayConfig",
    "RelayRun",
    "RelayState",
]
