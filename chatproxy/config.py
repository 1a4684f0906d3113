"""
Configuration — protocol constants + settings from .env / environment.
"""
from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings


# ── Backend defaults ─────────────────────────────────────────────────────────

GEMINI_MODEL = "gemini-2.0-flash"

DEFAULT_SYSTEM_INSTRUCTION = "你是一个高效的助理，能分布思考解决用户的问题，你一般都用中文回答内容"

DEFAULT_TEMPERATURE = 1.0
MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0

# Caller-facing assistant role and the label Gemini expects instead
ASSISTANT_ROLE = "assistant"
MODEL_ROLE = "model"


# ── Packet protocol ──────────────────────────────────────────────────────────

PACKET_EVENT = "message"
PACKET_ID_PREFIX = "chunk_"

# Only one mode is supported, all codes are 0
CONTEXT_MODE = 0
OUTPUT_MODE = 0
RETURN_TYPE = 0
CONTENT_TYPE = 0


# ── App settings (from .env) ─────────────────────────────────────────────────

class AppSettings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8000
    gemini_model: str = GEMINI_MODEL
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    # Comma-separated list; "*" allows any origin
    cors_origins: str = "*"
    log_level: str = "INFO"

    model_config = {"env_prefix": "CHATPROXY_", "env_file": ".env", "extra": "ignore"}

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()] or ["*"]


# ── Singleton loader ─────────────────────────────────────────────────────────

_settings: Optional[AppSettings] = None


def get_settings() -> AppSettings:
    global _settings
    if _settings is None:
        _settings = AppSettings()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None
