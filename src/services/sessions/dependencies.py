# src/services/sessions/dependencies.py
from fastapi import Request

from src.services.sessions.repository import SessionRepository


def get_session_repository(request: Request) -> SessionRepository:
    return request.app.state.session_repository
