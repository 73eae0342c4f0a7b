import logging
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from fastapi import FastAPI

from wow_oracle.config import load_config
from wow_oracle.links import MentionResolver
from wow_oracle.llm import LLM, HttpLLM
from wow_oracle.routes import router

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)


def create_app(
    config: dict[str, Any] | None = None,
    llm: LLM | None = None,
    resolver: MentionResolver | None = None,
) -> FastAPI:
    resolved = config or load_config()

    app = FastAPI(title="Azeroth Oracle")
    app.state.config = resolved
    app.state.llm = llm or HttpLLM.from_config(resolved)
    # Single resolver per app: all requests share its cache and in-flight lookups
    app.state.resolver = resolver or MentionResolver.from_config(resolved)
    app.include_router(router, prefix="/api")

    logger.debug(
        "app created llm=%s lookup_domain=%s",
        resolved["provider_url"], resolved["service_domain"],
    )
    return app


# Default app instance for uvicorn (configured from environment / .env)
app = create_app()
