"""
Model registry — builds the backend adapter for one request.

Only Gemini is supported. The caller's API key is bound to the adapter and
lives as long as the request does; nothing here caches it.
"""
from __future__ import annotations

from typing import Callable, Optional

from chatproxy.config import AppSettings, get_settings
from chatproxy.models.base import BaseModelAdapter

AdapterFactory = Callable[[str], BaseModelAdapter]


def get_adapter(api_key: str, settings: Optional[AppSettings] = None) -> BaseModelAdapter:
    from chatproxy.models.gemini import GeminiAdapter

    cfg = settings or get_settings()
    return GeminiAdapter(api_key=api_key, model_name=cfg.gemini_model)
