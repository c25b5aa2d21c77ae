"""
Logging utilities for audit records.

Dependencies: json
System role: Logging helper functions
"""

import json
from typing import Any


def to_audit_json(value: Any) -> str:
    """
    Render a value verbatim as JSON for the audit trail.

    Nothing is summarised or truncated; non-serialisable leaves fall back
    to ``str``.

    Args:
        value: JSON-compatible value

    Returns:
        str: Compact, key-sorted JSON document
    """
    return json.dumps(value, default=str, sort_keys=True, ensure_ascii=False)
