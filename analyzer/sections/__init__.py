# Sections subpackage - landing page section heuristics
from .detector import SECTION_KEYWORDS, SECTION_NAMES, detect_sections, missing_sections

__all__ = [
    "SECTION_KEYWORDS",
    "SECTION_NAMES",
    "detect_sections",
    "missing_sections",
]
