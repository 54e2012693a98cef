"""
Link management routes.

GET    /api/urls        — list links with their click counts, newest first
POST   /api/urls        — create a short link (201)
GET    /api/urls/{id}   — read a link with its click count
PATCH  /api/urls/{id}   — partial update (isActive, title, description, tags, expiresAt)
DELETE /api/urls/{id}   — delete a link and its click history
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from config import AppSettings
from dependencies import get_settings, get_url_service
from schemas.dto.requests.url import CreateUrlRequest, UpdateUrlRequest
from schemas.dto.responses.common import ErrorResponse, MessageResponse
from schemas.dto.responses.url import UrlResponse
from services.url_service import UrlService

router = APIRouter(
    prefix="/api/urls",
    tags=["urls"],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)


@router.get("", response_model=list[UrlResponse])
async def list_urls(
    service: UrlService = Depends(get_url_service),
    settings: AppSettings = Depends(get_settings),
) -> list[UrlResponse]:
    docs = await service.list_urls()
    return [UrlResponse.from_doc(doc, settings.base_url) for doc in docs]


@router.post("", status_code=201, response_model=UrlResponse)
async def create_url(
    body: CreateUrlRequest,
    service: UrlService = Depends(get_url_service),
    settings: AppSettings = Depends(get_settings),
) -> UrlResponse:
    doc = await service.create_url(body)
    return UrlResponse.from_doc(doc, settings.base_url)


@router.get("/{url_id}", response_model=UrlResponse)
async def get_url(
    url_id: str,
    service: UrlService = Depends(get_url_service),
    settings: AppSettings = Depends(get_settings),
) -> UrlResponse:
    doc = await service.get_url(url_id)
    return UrlResponse.from_doc(doc, settings.base_url)


@router.patch("/{url_id}", response_model=UrlResponse)
async def update_url(
    url_id: str,
    body: UpdateUrlRequest,
    service: UrlService = Depends(get_url_service),
    settings: AppSettings = Depends(get_settings),
) -> UrlResponse:
    doc = await service.update_url(url_id, body)
    return UrlResponse.from_doc(doc, settings.base_url)


@router.delete(
    "/{url_id}", response_model=MessageResponse, response_model_exclude_none=True
)
async def delete_url(
    url_id: str,
    service: UrlService = Depends(get_url_service),
) -> MessageResponse:
    await service.delete_url(url_id)
    return MessageResponse(success=True)
