# Parsing subpackage - model output parsing utilities
from .json import ModelOutputError, finite_number, repair_and_parse_json, strip_json_wrappers

__all__ = [
    "ModelOutputError",
    "finite_number",
    "repair_and_parse_json",
    "strip_json_wrappers",
]
