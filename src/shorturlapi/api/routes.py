from fastapi import APIRouter, Depends, Response, status

from shorturlapi.api.deps import get_app_settings, get_shortener, get_store
from shorturlapi.core.config import Settings
from shorturlapi.schemas.urls import (
    CreateUrlRequest,
    ErrorResponse,
    MessageResponse,
    ShortUrlResponse,
    UpdateUrlRequest,
    UrlDataResponse,
    UrlListResponse,
    UrlMessageResponse,
)
from shorturlapi.services.shortener import ShorteningService
from shorturlapi.services.store import UrlStore

router = APIRouter(prefix="/urls", tags=["urls"])

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "URL not found"}}
_INVALID = {422: {"model": ErrorResponse, "description": "Validation failed"}}


@router.get("", response_model=UrlListResponse)
def list_urls(
    store: UrlStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    records = store.list_all(order="created_desc")
    return UrlListResponse(data=[ShortUrlResponse.from_record(r, settings.base_url) for r in records])


@router.post(
    "",
    response_model=UrlMessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={200: {"model": UrlMessageResponse, "description": "URL already exists"}, **_INVALID},
)
def create_url(
    req: CreateUrlRequest,
    response: Response,
    shortener: ShorteningService = Depends(get_shortener),
    settings: Settings = Depends(get_app_settings),
):
    record, created = shortener.shorten(req.url, req.expires_at)

    if not created:
        response.status_code = status.HTTP_200_OK

    return UrlMessageResponse(
        message="URL shortened successfully" if created else "URL already exists",
        data=ShortUrlResponse.from_record(record, settings.base_url),
    )


@router.get("/{id}", response_model=UrlDataResponse, responses=_NOT_FOUND)
def get_url(
    id: str,
    store: UrlStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    record = store.find_by_id(id)
    return UrlDataResponse(data=ShortUrlResponse.from_record(record, settings.base_url))


@router.put("/{id}", response_model=UrlMessageResponse, responses={**_NOT_FOUND, **_INVALID})
def update_url(
    id: str,
    req: UpdateUrlRequest,
    shortener: ShorteningService = Depends(get_shortener),
    settings: Settings = Depends(get_app_settings),
):
    record = shortener.update(id, req.model_dump(exclude_unset=True))
    return UrlMessageResponse(
        message="URL updated successfully",
        data=ShortUrlResponse.from_record(record, settings.base_url),
    )


@router.delete("/{id}", response_model=MessageResponse, responses=_NOT_FOUND)
def delete_url(id: str, store: UrlStore = Depends(get_store)):
    store.delete(id)
    return MessageResponse(message="URL deleted successfully")
