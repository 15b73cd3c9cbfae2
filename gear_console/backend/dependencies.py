from typing import Optional

from fastapi import Request
from pydantic import ValidationError

from gear_console.backend.store import InventoryStore


def get_store(request: Request) -> InventoryStore:
    return request.app.state.store


def parse_int(raw: Optional[str], default: int) -> int:
    """Parse a query parameter, falling back to default when it is missing or malformed."""
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def first_error(e: ValidationError) -> str:
    errors = e.errors()
    if not errors:
        return "Invalid request body"
    location = ".".join(str(part) for part in errors[0]["loc"])
    return f"{location}: {errors[0]['msg']}"
