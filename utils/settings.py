"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the process environment.

    Attributes:
        openai_api_key: Secret for the completion service. Required.
        openai_model: Model identifier placed in generated payloads.
        max_output_tokens: Upper bound on generated tokens per image.
        max_images: Maximum number of images a workspace may hold.
        generation_concurrency: Images processed at once (1 = sequential).
        proxy_base_url: Optional external base URL of the proxy endpoint.
        proxy_timeout_seconds: Timeout for a single proxy round trip.
        log_level: Name of the root logging level.
    """

    openai_api_key: str
    openai_model: str = "gpt-4o"
    max_output_tokens: int = 300
    max_images: int = 5
    generation_concurrency: int = 1
    proxy_base_url: Optional[str] = None
    proxy_timeout_seconds: float = 60.0
    log_level: str = "INFO"


def _int_env(name: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be >= {minimum}, got {value}")
    return value


def load_settings() -> Settings:
    """Read settings from the environment, failing fast on a missing API key."""
    api_key = os.getenv("OPENAI_API_KEY")
    if not api_key:
        raise RuntimeError("OPENAI_API_KEY environment variable is not set")

    timeout_raw = os.getenv("PROXY_TIMEOUT_SECONDS", "60")
    try:
        timeout = float(timeout_raw)
    except ValueError as exc:
        raise RuntimeError(f"PROXY_TIMEOUT_SECONDS must be a number, got {timeout_raw!r}") from exc

    return Settings(
        openai_api_key=api_key,
        openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
        max_output_tokens=_int_env("MAX_OUTPUT_TOKENS", 300),
        max_images=_int_env("MAX_IMAGES", 5),
        generation_concurrency=_int_env("GENERATION_CONCURRENCY", 1),
        proxy_base_url=os.getenv("PROXY_BASE_URL") or None,
        proxy_timeout_seconds=timeout,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
