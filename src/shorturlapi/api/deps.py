from __future__ import annotations

from fastapi import Request

from shorturlapi.core.config import Settings
from shorturlapi.services.resolver import Resolver
from shorturlapi.services.shortener import ShorteningService
from shorturlapi.services.store import UrlStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> UrlStore:
    return request.app.state.store


def get_shortener(request: Request) -> ShorteningService:
    return request.app.state.shortener


def get_resolver(request: Request) -> Resolver:
    return request.app.state.resolver
