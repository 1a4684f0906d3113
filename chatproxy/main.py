"""
chatproxy — FastAPI entrypoint.
"""
from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env before anything else
load_dotenv()

from chatproxy.config import get_settings
from chatproxy.routers.chat import router as chat_router

VERSION = "0.1.0"


def configure_logging(level: str | None = None) -> None:
    level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger("chatproxy").setLevel(level)


# Applied at import so `uvicorn chatproxy.main:app` gets it too
configure_logging()


app = FastAPI(
    title="chatproxy",
    description="Gemini chat proxy with JSON and streamed packet responses",
    version=VERSION,
)

# CHATPROXY_CORS_ORIGINS: comma-separated list of allowed origins, default "*"
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origin_list(),
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)

app.include_router(chat_router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"status": "ok", "version": VERSION}


def start():
    import uvicorn
    settings = get_settings()
    uvicorn.run("chatproxy.main:app", host=settings.host, port=settings.port)


if __name__ == "__main__":
    start()
