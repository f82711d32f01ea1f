# Reporting subpackage - PDF export
from .pdf import generate_pdf, suggest_filename, wrap_text

__all__ = [
    "generate_pdf",
    "suggest_filename",
    "wrap_text",
]
