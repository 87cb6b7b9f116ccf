"""Response body decoding and pydantic-backed parsers."""

from __future__ import annotations

import json
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import TypeAdapter, ValidationError

from .errors import ResponseParseError
from .transport import RawResponse

T = TypeVar("T")

_adapter_cache: dict[Any, TypeAdapter[Any]] = {}
_MAX_SAMPLE_DEPTH = 2
_MAX_SAMPLE_ITEMS = 5
_MAX_SAMPLE_STRING = 200


def model_name(model_type: Any) -> str:
    return getattr(model_type, "__name__", repr(model_type))


def _adapter_for(model_type: Any) -> TypeAdapter[Any]:
    try:
        adapter = _adapter_cache.get(model_type)
    except TypeError:
        return TypeAdapter(model_type)

    if adapter is None:
        adapter = TypeAdapter(model_type)
        _adapter_cache[model_type] = adapter
    return adapter


def sample_payload(value: Any, depth: int = 0) -> Any:
    if depth > _MAX_SAMPLE_DEPTH:
        return "<trimmed>"

    if isinstance(value, dict):
        sampled: dict[str, Any] = {}
        for index, (key, nested) in enumerate(value.items()):
            if index >= _MAX_SAMPLE_ITEMS:
                sampled["..."] = "<trimmed>"
                break
            sampled[str(key)] = sample_payload(nested, depth + 1)
        return sampled

    if isinstance(value, list):
        sampled_items = [sample_payload(item, depth + 1) for item in value[:_MAX_SAMPLE_ITEMS]]
        if len(value) > _MAX_SAMPLE_ITEMS:
            sampled_items.append("<trimmed>")
        return sampled_items

    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")

    if isinstance(value, str):
        return value if len(value) <= _MAX_SAMPLE_STRING else f"{value[:_MAX_SAMPLE_STRING]}..."

    if isinstance(value, (int, float, bool)) or value is None:
        return value

    return repr(value)


def decode_body(response: RawResponse) -> Any:
    """Decode a response body into JSON-compatible python values.

    Empty bodies decode to ``None``. Bodies are treated as JSON regardless of
    the declared content type, since the security API only speaks JSON; a body
    that is not valid JSON raises ``json.JSONDecodeError``.
    """
    if not response.body:
        return None
    return json.loads(response.body)


def error_payload(response: RawResponse) -> Any:
    if not response.body:
        return None
    try:
        return json.loads(response.body)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.body.decode("utf-8", errors="replace")


def extract_reason(payload: Any) -> str | None:
    """Pull a human readable reason out of an error response body.

    Accepts the cluster's ``{"error": {"type": ..., "reason": ...}}`` envelope,
    a bare ``{"error": "..."}`` string, or a plain text body.
    """
    if isinstance(payload, str):
        stripped = payload.strip()
        return stripped or None
    if not isinstance(payload, dict):
        return None

    error = payload.get("error")
    if isinstance(error, str):
        return error
    if isinstance(error, dict):
        reason = error.get("reason")
        if isinstance(reason, str) and reason:
            return reason
        root_causes = error.get("root_cause")
        if isinstance(root_causes, list) and root_causes and isinstance(root_causes[0], dict):
            root_reason = root_causes[0].get("reason")
            if isinstance(root_reason, str) and root_reason:
                return root_reason
        error_type = error.get("type")
        if isinstance(error_type, str) and error_type:
            return error_type

    message = payload.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def model_parser(model_type: type[T], *, operation: str | None = None) -> Callable[[Any], T]:
    """Build a parser validating a decoded payload against ``model_type``."""
    name = model_name(model_type)

    def parse(payload: Any) -> T:
        adapter = _adapter_for(model_type)
        try:
            return adapter.validate_python(payload)
        except ValidationError as error:
            raise ResponseParseError(
                operation=operation or name,
                model_name=name,
                errors=error.errors(),
                raw_sample=sample_payload(payload),
            ) from error

    parse.__name__ = f"parse_{name}"
    parse.__qualname__ = parse.__name__
    return parse
