"""Shared async Supabase client backing the question store.

Import using: from app.DB.supabase import get_supabase
"""
from __future__ import annotations

import asyncio
from typing import Optional
from supabase import AsyncClient, create_async_client
from app.Core.config import get_settings

_client: Optional[AsyncClient] = None
_lock = asyncio.Lock()

async def get_supabase() -> AsyncClient:
    global _client
    if _client is not None:
        return _client
    async with _lock:
        if _client is None:
            settings = get_settings()
            if not settings.supabase_url or not settings.supabase_key:
                raise RuntimeError("SUPABASE_URL / SUPABASE_ANON_KEY not configured for the question store")
            _client = await create_async_client(settings.supabase_url, settings.supabase_key)
    return _client

__all__ = ["get_supabase"]
