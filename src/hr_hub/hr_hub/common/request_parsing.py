from __future__ import annotations

from datetime import datetime, time
from typing import Type, TypeVar

import pydantic
from flask import request

from ..core.exceptions import ValidationError

M = TypeVar("M", bound=pydantic.BaseModel)


def to_camel(string: str) -> str:
    parts = string.split("_")
    return parts[0] + "".join(word.capitalize() for word in parts[1:])


class CamelModel(pydantic.BaseModel):
    """Request body/query model: camelCase on the wire, snake_case in Python."""

    model_config = pydantic.ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def hhmm(value):
    """Field validator helper: accept only `HH:MM` strings (or time objects)."""
    if value is None or isinstance(value, time):
        return value
    try:
        return datetime.strptime(str(value), "%H:%M").time()
    except ValueError:
        raise ValueError("Time must be in HH:MM format")


def _first_error(exc: pydantic.ValidationError) -> str:
    err = exc.errors()[0]
    loc = ".".join(str(p) for p in err.get("loc", ()) if p != "__root__")
    msg = str(err.get("msg", "Invalid input"))
    # pydantic prefixes messages raised from validators
    msg = msg.removeprefix("Value error, ")
    return f"{loc}: {msg}" if loc else msg


def validate_model(model: Type[M], data: dict) -> M:
    try:
        return model.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(_first_error(e))


def parse_body(model: Type[M]) -> M:
    return validate_model(model, request.get_json(silent=True) or {})


def parse_query(model: Type[M]) -> M:
    return validate_model(model, request.args.to_dict())
