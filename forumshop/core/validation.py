"""
Validation layer - turns untrusted input into typed values or a ValidationError.
Pure functions: no database access, no side effects.
"""

import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, TypeVar
from urllib.parse import urlparse

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from forumshop.errors import (
    InvalidFormat,
    InvalidRange,
    MissingField,
    UnknownParameter,
    ValidationError,
)

ModelT = TypeVar("ModelT", bound=BaseModel)

# Request sections FastAPI prefixes to error locations
_LOCATION_ROOTS = {"body", "query", "path", "header", "form"}

_RANGE_ERRORS = {
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
    "too_short",
    "too_long",
    "string_too_short",
    "string_too_long",
    "decimal_max_digits",
    "decimal_max_places",
    "decimal_whole_digits",
}

_NAME_DISALLOWED = re.compile(r"[^\w .,'&()\-]")
_TEXT_DISALLOWED = re.compile(r"[^\w\s.,!?'\"&():;%\-]")


def format_location(loc: Sequence[str | int]) -> str:
    """("items", 0, "quantity") -> "items[0].quantity"."""
    parts = list(loc)
    if parts and parts[0] in _LOCATION_ROOTS:
        parts = parts[1:]
    out = ""
    for part in parts:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out


def translate_errors(errors: Sequence[Mapping[str, Any]]) -> ValidationError:
    """Map pydantic error dicts onto the MissingField/InvalidRange/InvalidFormat taxonomy."""
    if not errors:
        return ValidationError()
    missing = [format_location(e["loc"]) for e in errors if e.get("type") == "missing"]
    if missing:
        if missing == [""]:
            return ValidationError("Invalid request data")
        return MissingField(missing)
    first = errors[0]
    error_type = first.get("type", "")
    if error_type in ("json_invalid", "model_type", "model_attributes_type", "dict_type"):
        return ValidationError("Invalid request data")
    field = format_location(first["loc"]) or "request"
    message = first.get("msg", "invalid value")
    if error_type in _RANGE_ERRORS:
        return InvalidRange(f"Invalid value for '{field}': {message}")
    return InvalidFormat(f"Invalid value for '{field}': {message}")


def parse_payload(model: type[ModelT], data: Any) -> ModelT:
    """Validate raw data (JSON body or form fields) against a request schema."""
    if not isinstance(data, Mapping):
        raise ValidationError("Invalid request data")
    try:
        return model.model_validate(dict(data))
    except PydanticValidationError as exc:
        raise translate_errors(exc.errors()) from exc


def check_query_params(params: Iterable[str], allowed: Iterable[str]) -> None:
    """Reject any query parameter outside the endpoint's whitelist."""
    allowed = set(allowed)
    for name in params:
        if name not in allowed:
            raise UnknownParameter(name)


def parse_id(value: str | None, field: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError:
        raise InvalidFormat(f"Invalid {field.replace('_', ' ')}") from None
    if parsed <= 0:
        raise InvalidRange(f"Invalid {field.replace('_', ' ')}")
    return parsed


def parse_id_list(raw: str, field: str = "user_ids") -> list[int]:
    """Comma-separated ids, order kept, duplicates dropped; names the offending position."""
    ids: list[int] = []
    for index, chunk in enumerate(raw.split(",")):
        chunk = chunk.strip()
        try:
            value = int(chunk)
        except ValueError:
            raise InvalidFormat(
                f"Invalid user ID format in '{field}' at position {index}"
            ) from None
        if value <= 0:
            raise InvalidRange(f"Invalid user ID in '{field}' at position {index}")
        if value not in ids:
            ids.append(value)
    if not ids:
        raise MissingField([field])
    return ids


def clean_name(value: Any) -> Any:
    """Trim and drop characters outside letters, digits and light punctuation."""
    if not isinstance(value, str):
        return value
    return _NAME_DISALLOWED.sub("", value.strip()).strip()


def clean_text(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    return _TEXT_DISALLOWED.sub("", value.strip()).strip()


def check_image_url(value: str) -> str:
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("must be an http(s) URL")
    return value


def form_fields(form: Mapping[str, Any], *, lists: Iterable[str] = ()) -> dict[str, Any]:
    """Plain-text fields of a multipart form; empty values are treated as absent."""
    lists = set(lists)
    data: dict[str, Any] = {}
    for key in form.keys():
        if key in lists:
            values = [v for v in form.getlist(key) if isinstance(v, str) and v.strip()]
            if values:
                data[key] = values
            continue
        value = form.get(key)
        if isinstance(value, str) and value.strip():
            data[key] = value
    return data


def _parse_int(value: str, name: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise InvalidFormat(f"Invalid {name}") from None


def parse_paging(
    page: str | None, limit: str | None, *, default_limit: int, max_limit: int
) -> tuple[int, int]:
    """page >= 1 and 1 <= limit <= max_limit; both optional."""
    page_num, limit_num = 1, default_limit
    if page not in (None, ""):
        page_num = _parse_int(page, "page")
        if page_num < 1:
            raise InvalidRange("Invalid page: must be at least 1")
    if limit not in (None, ""):
        limit_num = _parse_int(limit, "limit")
        if not 1 <= limit_num <= max_limit:
            raise InvalidRange(f"Invalid limit: must be between 1 and {max_limit}")
    return page_num, limit_num
