import json
import logging
import math
import re

import json5
import demjson3

logger = logging.getLogger(__name__)


class ModelOutputError(ValueError):
    """Raised when the model's answer is not usable as a report"""

    def __init__(self, message: str):
        super().__init__(f"Invalid model output: {message}")


def finite_number(value, name: str):
    """
    Numeric model field as int/float, or None when it is absent or not a number.

    json and json5 both accept NaN and Infinity tokens; those are a schema
    violation, not a value to clamp.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        raise ModelOutputError(f"'{name}' must be a finite number, got {value}")
    return value


def strip_json_wrappers(response_text: str) -> str:
    """Remove markdown fences and any prose around the outermost JSON object"""
    text = (response_text or "").strip()

    if text.startswith("```json"):
        text = text.replace("```json", "").replace("```", "").strip()
    elif text.startswith("```"):
        text = text.replace("```", "").strip()

    if not text.startswith("{"):
        start_idx = text.find("{")
        end_idx = text.rfind("}")
        if start_idx != -1 and end_idx > start_idx:
            text = text[start_idx : end_idx + 1]
    return text


# JSON Repair and Parsing Function
def repair_and_parse_json(response_text: str) -> dict:
    """
    Multi-layered JSON parsing with auto-repair capabilities.

    Attempts to parse JSON through multiple strategies:
    1. Standard json.loads()
    2. Clean common issues (trailing commas, comments)
    3. json5 parser (tolerates comments and trailing commas)
    4. demjson3 parser (auto-repairs many errors)

    There is no partial-extraction fallback. Either a whole object parses
    or the answer is rejected.

    Args:
        response_text: Raw text response from Claude

    Returns:
        Parsed dictionary

    Raises:
        ModelOutputError: If the text holds no JSON object or all layers fail
    """
    text = strip_json_wrappers(response_text)
    if not text.startswith("{"):
        logger.warning(f"⚠️ No JSON object found in response: {text[:200]!r}")
        raise ModelOutputError("response is not JSON")

    errors = []
    result = None

    # Layer 1: Try standard JSON parser first
    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        errors.append(f"Standard JSON: {str(e)}")
        logger.debug(f"❌ Layer 1 failed: {str(e)}")

    # Layer 2: Clean common Claude JSON mistakes
    if result is None:
        cleaned = text
        # Remove trailing commas before closing braces/brackets
        cleaned = re.sub(r",(\s*[}\]])", r"\1", cleaned)
        # Remove single-line comments (// ...) that start a line or follow a comma/brace
        cleaned = re.sub(r"(^|[\s,{\[])//[^\n]*", r"\1", cleaned)
        # Remove multi-line comments (/* ... */)
        cleaned = re.sub(r"/\*.*?\*/", "", cleaned, flags=re.DOTALL)
        try:
            result = json.loads(cleaned)
            logger.info("🔧 Parsed model JSON after cleaning")
        except json.JSONDecodeError as e:
            errors.append(f"Cleaned JSON: {str(e)}")
            logger.debug(f"❌ Layer 2 failed: {str(e)}")

    # Layer 3: Try json5 (tolerates trailing commas and comments)
    if result is None:
        try:
            result = json5.loads(text)
            logger.info("🔧 Parsed model JSON with json5")
        except Exception as e:
            errors.append(f"JSON5: {str(e)}")
            logger.debug(f"❌ Layer 3 failed: {str(e)}")

    # Layer 4: Try demjson3 (auto-repairs many JSON errors)
    if result is None:
        try:
            result = demjson3.decode(text)
            logger.info("🔧 Parsed model JSON with demjson3")
        except Exception as e:
            errors.append(f"DemJSON: {str(e)}")
            logger.debug(f"❌ Layer 4 failed: {str(e)}")

    if result is None:
        logger.error(f"❌ JSON parsing failed. Errors: {'; '.join(errors)}")
        logger.error(f"Response preview: {text[:200]}...")
        raise ModelOutputError(f"could not parse JSON ({errors[0]})")

    if not isinstance(result, dict):
        raise ModelOutputError(f"expected a JSON object, got {type(result).__name__}")

    return result
