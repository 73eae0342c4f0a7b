"""Mention rewriting and resolution cache endpoints."""

from fastapi import APIRouter, Request

from .models import RewriteBody

router = APIRouter()


@router.post("/links/rewrite")
async def rewrite_links(body: RewriteBody, request: Request):
    """Replace {{mentions}} in arbitrary text with Wowhead links."""
    text = await request.app.state.resolver.rewrite_mentions(body.text, body.era)
    return {"text": text}


@router.get("/links/cache")
async def cache_stats(request: Request):
    """Resolution cache size and hit/miss counters."""
    return request.app.state.resolver.cache.stats()
