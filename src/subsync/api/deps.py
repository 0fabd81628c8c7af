from fastapi import Request

from subsync.core.config import Settings
from subsync.services.event_router import EventRouter
from subsync.services.record_store import RecordStore


def app_settings(request: Request) -> Settings:
    """FastAPI dependency: settings the app was built with"""
    return request.app.state.settings


def record_store(request: Request) -> RecordStore:
    """FastAPI dependency: injected record store"""
    return request.app.state.store


def event_router(request: Request) -> EventRouter:
    """FastAPI dependency: event router bound to the record store"""
    return request.app.state.event_router
