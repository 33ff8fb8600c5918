# src/settings.py

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_API_BASE_URL = "http://localhost:8080/api/v1/lsp_backend"
DEFAULT_SEARCH_PATH = "/lsp/search"
DEFAULT_TIMEOUT_S = 15.0


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    api_base_url: str = DEFAULT_API_BASE_URL
    api_token_var: str = "LOGISTICS_API_TOKEN"
    search_path: str = DEFAULT_SEARCH_PATH
    search_timeout_s: float = DEFAULT_TIMEOUT_S
    log_level: str = "INFO"
    use_mock_provider: bool = False


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Read settings from the environment (and `.env`, if present).

    Variables:
      LOGISTICS_API_BASE_URL, LOGISTICS_API_TOKEN, LSP_SEARCH_PATH,
      LSP_SEARCH_TIMEOUT_S, LOG_LEVEL, USE_MOCK_PROVIDER
    """
    load_dotenv(env_file)

    return Settings(
        api_base_url=os.getenv("LOGISTICS_API_BASE_URL", DEFAULT_API_BASE_URL).strip().rstrip("/"),
        search_path=os.getenv("LSP_SEARCH_PATH", DEFAULT_SEARCH_PATH).strip() or DEFAULT_SEARCH_PATH,
        search_timeout_s=_env_float("LSP_SEARCH_TIMEOUT_S", DEFAULT_TIMEOUT_S),
        log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
        use_mock_provider=_env_bool("USE_MOCK_PROVIDER"),
    )
