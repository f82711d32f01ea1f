# Utils package - Utility modules organized by domain
# Import from subpackages for convenience

from .clients.anthropic import call_anthropic_api_with_retry
from .parsing.json import repair_and_parse_json
from .sse import sse_event

__all__ = [
    "call_anthropic_api_with_retry",
    "repair_and_parse_json",
    "sse_event",
]
