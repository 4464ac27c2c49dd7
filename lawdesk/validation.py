"""
LawDesk - Request Body Validation

Bodies are checked against a pydantic schema and produce a tagged result
(`ok` / `value` / `errors`) instead of raising, so each handler decides how
a failure maps onto its response.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

from fastapi import HTTPException, Request, status
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound=BaseModel)


@dataclass
class Validation(Generic[T]):
    ok: bool
    value: Optional[T] = None
    errors: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def success(cls, value: T) -> "Validation[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, errors: list[dict[str, Any]]) -> "Validation[T]":
        return cls(ok=False, errors=errors)


def validate_payload(schema: type[T], payload: Any) -> Validation[T]:
    """Validate a decoded JSON body (or form dict) against `schema`."""
    if not isinstance(payload, dict):
        return Validation.failure([{"loc": [], "msg": "Request body must be a JSON object", "type": "object_type"}])

    try:
        return Validation.success(schema.model_validate(payload))
    except ValidationError as e:
        return Validation.failure(
            e.errors(include_url=False, include_context=False, include_input=False)
        )


def expect_valid(result: Validation[T]) -> T:
    """Return the validated value or raise 400 with the collected errors."""
    if not result.ok:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors)
    return result.value


async def json_body(request: Request) -> Any:
    """
    Decoded JSON body, 400 when it is not valid JSON.

    Handlers read it after their lookups so an unknown id is a 404 whatever
    the body holds.
    """
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body must be valid JSON",
        )
