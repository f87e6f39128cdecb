"""
Response shaping.

Reads return the bare resource (or list); writes return a `{message, data}`
envelope; errors return `{message, status}` and never carry data.
"""

from __future__ import annotations

from typing import Any


def envelope(message: str, data: Any) -> dict[str, Any]:
    return {"message": message, "data": data}


def error_body(message: str, status: int) -> dict[str, Any]:
    return {"message": message, "status": status}
