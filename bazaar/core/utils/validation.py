"""Input validation helpers."""

from __future__ import annotations

from typing import Type, TypeVar

from flask import request
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from bazaar.core.errors import ValidationError

M = TypeVar("M", bound=BaseModel)


def jsonable_errors(exc: PydanticValidationError) -> list[dict]:
    errors = exc.errors(include_url=False)
    for err in errors:
        if "ctx" in err and isinstance(err["ctx"], dict):
            err["ctx"] = {k: str(v) for k, v in err["ctx"].items()}
        err.pop("input", None)
    return errors


def first_error_message(errors: list[dict]) -> str:
    if not errors:
        return "Invalid request"
    err = errors[0]
    field = ".".join(str(part) for part in err.get("loc", ()) if part != "__root__")
    msg = str(err.get("msg", "invalid value"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{field}: {msg}" if field else msg


def request_payload() -> dict:
    """JSON body, or form fields for multipart/urlencoded submissions."""
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload
    return request.form.to_dict() if request.form else {}


def parse(model: Type[M], data: dict | None = None) -> M:
    """Validate ``data`` (default: the request payload) or raise a 400 ValidationError."""
    try:
        return model.model_validate(request_payload() if data is None else data)
    except PydanticValidationError as exc:
        errors = jsonable_errors(exc)
        raise ValidationError(first_error_message(errors), details=errors) from exc


__all__ = ["jsonable_errors", "first_error_message", "request_payload", "parse"]
