# src/services/sessions/routes.py
"""
HTTP эндпоинты сессий (watch-list).
Без sessionId в пути используется сессия по умолчанию из конфига.
"""

from fastapi import APIRouter, Depends

from src.config import settings
from src.services.sessions.repository import SessionRepository
from src.services.sessions.dependencies import get_session_repository
from src.shared.models.session_dto import SessionResponse, SessionUpdateRequest

router = APIRouter(prefix="/session", tags=["Session"])


@router.get("", response_model=SessionResponse)
async def get_default_session(
    repository: SessionRepository = Depends(get_session_repository),
):
    return await get_session(settings.tracking.DEFAULT_SESSION_ID, repository)


@router.post("", response_model=SessionResponse)
async def update_default_session(
    request: SessionUpdateRequest,
    repository: SessionRepository = Depends(get_session_repository),
):
    return await update_session(settings.tracking.DEFAULT_SESSION_ID, request, repository)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    repository: SessionRepository = Depends(get_session_repository),
):
    """Получить сессию; пустая создаётся при первом обращении."""
    session = await repository.get_or_create(session_id)
    return SessionResponse(session=session)


@router.post("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: str,
    request: SessionUpdateRequest,
    repository: SessionRepository = Depends(get_session_repository),
):
    """Полностью заменить список отслеживаемых треков."""
    session = await repository.upsert(session_id, request.tracked_users)
    return SessionResponse(session=session)
