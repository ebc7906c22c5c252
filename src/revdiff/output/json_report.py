"""JSON reporter for scripted use."""

from __future__ import annotations

import json
from typing import Any, Dict


def render(result: Dict[str, Any]) -> str:
    """Return formatted JSON string."""
    return json.dumps(result, indent=2, ensure_ascii=False)
