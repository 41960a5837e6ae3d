"""Helpers for turning failures into HTTP error payloads."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException

from hoskdog.config import is_development


def failure(status_code: int, error: str, exc: Optional[BaseException] = None, **extra: Any) -> HTTPException:
    """HTTPException whose body carries ``error`` plus details in development."""
    detail: Dict[str, Any] = {"error": error, **extra}
    if exc is not None and is_development():
        detail["details"] = str(exc)
    return HTTPException(status_code=status_code, detail=detail)


__all__ = ["failure"]
