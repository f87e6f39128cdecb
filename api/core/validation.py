"""
Validation gate.

Every operation declares its input rules as a pydantic model. `validate()`
turns raw request data into either `Valid(parsed)` or `Invalid(errors)`;
`require_valid()` is the short-circuit used by handlers, raising `BadInput`
with every violated field joined into one message.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from fastapi import Request
from pydantic import BaseModel, ValidationError
from starlette.datastructures import UploadFile

from .errors import BadInput

M = TypeVar("M", bound=BaseModel)

# Upper bound of a Postgres `serial` column.
MAX_ID = 2_147_483_647


@dataclass(frozen=True)
class FieldError:
    field: str
    reason: str


@dataclass(frozen=True)
class Valid(Generic[M]):
    value: M


@dataclass(frozen=True)
class Invalid:
    errors: tuple[FieldError, ...]

    @property
    def message(self) -> str:
        return ", ".join(f"{e.reason}: {e.field}" for e in self.errors)


Outcome = Union[Valid[M], Invalid]


def _field_name(loc: tuple[Any, ...]) -> str:
    name = ".".join(str(part) for part in loc)
    return name or "body"


def _reason(error: dict[str, Any]) -> str:
    msg = str(error.get("msg") or "Invalid value")
    # pydantic prefixes messages raised from custom validators.
    return msg.removeprefix("Value error, ")


def validate(model: type[M], data: Any) -> Outcome[M]:
    try:
        return Valid(model.model_validate(data))
    except ValidationError as exc:
        errors = tuple(
            FieldError(field=_field_name(tuple(err.get("loc") or ())), reason=_reason(err))
            for err in exc.errors()
        )
        return Invalid(errors)


def require_valid(model: type[M], data: Any) -> M:
    outcome = validate(model, data)
    if isinstance(outcome, Invalid):
        raise BadInput(outcome.message)
    return outcome.value


def parse_id(raw: str, *, field: str = "id") -> int:
    """
    Validate a path identifier: a positive integer.
    """
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise BadInput(f"Invalid id: {field}")
    parsed = int(value)
    if not 1 <= parsed <= MAX_ID:
        raise BadInput(f"Invalid id: {field}")
    return parsed


def _reject_constant(name: str) -> Any:
    # NaN and Infinity are not JSON.
    raise ValueError(f"Invalid JSON constant {name}")


async def read_body(request: Request, *, file_field: str | None = None) -> tuple[dict[str, Any], UploadFile | None]:
    """
    Read a JSON or multipart/urlencoded body into a plain dict.

    For form bodies the upload named `file_field` (if any) is returned
    separately; other form values stay strings and are coerced by the
    operation's rules.
    """
    content_type = request.headers.get("content-type", "").lower()
    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        upload: UploadFile | None = None
        data: dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == file_field and value.filename:
                    upload = value
                continue
            data[key] = value
        return data, upload

    raw = await request.body()
    if not raw.strip():
        return {}, None
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as exc:
        raise BadInput("Malformed JSON: body") from exc
    if not isinstance(data, dict):
        raise BadInput("Expected a JSON object: body")
    return data, None
