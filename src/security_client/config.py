"""Configuration helpers for the security client."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

DEFAULT_BASE_URL = "http://127.0.0.1:9200"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_MAX_WORKERS = 8


@dataclass(slots=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    max_workers: int = DEFAULT_MAX_WORKERS
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls) -> "ClientConfig":
        base_url = _trim_or_default(os.getenv("SECURITY_CLIENT_BASE_URL"), DEFAULT_BASE_URL)
        timeout_ms = _parse_positive_int(os.getenv("SECURITY_CLIENT_TIMEOUT_MS"))
        timeout_seconds = (timeout_ms / 1000.0) if timeout_ms else DEFAULT_TIMEOUT_SECONDS
        max_workers = _parse_positive_int(os.getenv("SECURITY_CLIENT_MAX_WORKERS")) or DEFAULT_MAX_WORKERS

        raw_headers = os.getenv("SECURITY_CLIENT_HEADERS")
        headers: dict[str, str] = {}
        if raw_headers:
            try:
                headers = _string_headers(json.loads(raw_headers))
            except json.JSONDecodeError:
                headers = {}

        return cls(base_url=base_url, timeout_seconds=timeout_seconds, max_workers=max_workers, headers=headers)

    @classmethod
    def from_profile(
        cls,
        profile: str | None = None,
        *,
        config_path: str | Path | None = None,
    ) -> "ClientConfig":
        payload = load_profiles(config_path=config_path)
        profiles = payload.get("profiles")
        current_profile = payload.get("currentProfile")

        selected_name = (profile or current_profile or "local").strip() or "local"
        profile_entry: dict[str, Any] = {}
        if isinstance(profiles, dict) and isinstance(profiles.get(selected_name), dict):
            profile_entry = dict(profiles[selected_name])
        elif isinstance(profiles, dict) and isinstance(profiles.get("local"), dict):
            profile_entry = dict(profiles["local"])

        base_url = _trim_or_default(profile_entry.get("baseUrl"), DEFAULT_BASE_URL)
        timeout_ms = _parse_positive_int(profile_entry.get("timeoutMs"))
        timeout_seconds = (timeout_ms / 1000.0) if timeout_ms else DEFAULT_TIMEOUT_SECONDS
        max_workers = _parse_positive_int(profile_entry.get("maxWorkers")) or DEFAULT_MAX_WORKERS
        headers = _string_headers(profile_entry.get("headers"))

        return cls(base_url=base_url, timeout_seconds=timeout_seconds, max_workers=max_workers, headers=headers)


def default_config_path() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME")
    root = Path(xdg) if xdg else Path.home() / ".config"
    return root / "security-client" / "config.json"


def load_profiles(*, config_path: str | Path | None = None) -> dict[str, Any]:
    path = Path(config_path) if config_path else default_config_path()
    if not path.exists():
        return {"currentProfile": "local", "profiles": {}}

    try:
        with path.open("r", encoding="utf-8") as handle:
            parsed = json.load(handle)
    except (OSError, json.JSONDecodeError):
        return {"currentProfile": "local", "profiles": {}}

    if not isinstance(parsed, dict):
        return {"currentProfile": "local", "profiles": {}}
    return parsed


def _string_headers(value: Any) -> dict[str, str]:
    headers: dict[str, str] = {}
    if not isinstance(value, dict):
        return headers
    for key, item in value.items():
        if isinstance(key, str) and isinstance(item, str) and key.strip() and item.strip():
            headers[key] = item
    return headers


def _trim_or_default(value: Any, fallback: str) -> str:
    if not isinstance(value, str):
        return fallback
    trimmed = value.strip()
    return trimmed if trimmed else fallback


def _parse_positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str):
        try:
            parsed = int(value)
        except ValueError:
            return None
        return parsed if parsed > 0 else None
    return None
