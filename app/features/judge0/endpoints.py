from __future__ import annotations

from typing import List

from fastapi import APIRouter

from app.features.judge0.languages import supported_languages
from app.features.judge0.schemas import LanguageInfo

router = APIRouter(prefix="/judge0", tags=["judge0"])


@router.get("/languages", response_model=List[LanguageInfo], summary="Languages accepted by the compile endpoints")
async def get_supported_languages():
    return [LanguageInfo(**lang) for lang in supported_languages()]
