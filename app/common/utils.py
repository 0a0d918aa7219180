import json
import math
from typing import Any, Optional

def safe_json_loads(json_str: Any, default: Any = None) -> Any:
    """Decode a JSON string, passing through values that are already decoded."""
    if json_str is None or json_str == "":
        return default
    if not isinstance(json_str, (str, bytes)):
        return json_str
    try:
        return json.loads(json_str)
    except (json.JSONDecodeError, TypeError):
        return default

def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (2.5 -> 3, 12.5 -> 13)."""
    return int(math.floor(value + 0.5))

def parse_seconds(value: Optional[Any]) -> float:
    """Parse an execution time reported by Judge0; unparsable values count as 0."""
    if value is None:
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(parsed) or math.isinf(parsed):
        return 0.0
    return parsed
