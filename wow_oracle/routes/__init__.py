"""FastAPI API endpoints under /api.

Endpoint groups: chat (oracle answer, fact-check, starter suggestions),
links (direct mention rewriting, cache statistics), settings (health,
effective config).

Shared objects live on app.state (set by create_app): config, llm, resolver.
"""

from fastapi import APIRouter

from .chat import router as chat_router
from .links import router as links_router
from .settings import router as settings_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(chat_router)
router.include_router(links_router)
