"""Kiosk service: refresh orchestration, snapshot assembly and read API."""

from src.kiosk.api import APIResponse, KioskAPI, create_kiosk_api
from src.kiosk.orchestrator import CachedResult, CacheState, RefreshOrchestrator

__all__ = [
    "KioskAPI",
    "APIResponse",
    "create_kiosk_api",
    "RefreshOrchestrator",
    "CachedResult",
    "CacheState",
]
