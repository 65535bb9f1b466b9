"""
Newsletter API endpoints. Every route here is admin-only.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from auth import dependencies as auth_dependencies
from core.config import Settings, get_settings
from core.crud import TableRepository
from subscribers import repository as subscriber_repository
from subscribers.repository import SubscriberRepository

from . import repository, schemas, service
from .mailer import Mailer, get_mailer

router = APIRouter(
    prefix="/newsletter",
    tags=["newsletter"],
    dependencies=[Depends(auth_dependencies.require_admin)],
)


@router.post("/send")
async def send_newsletter(
    payload: schemas.SendNewsletterRequest,
    mailer: Mailer = Depends(get_mailer),
    subscribers: SubscriberRepository = Depends(subscriber_repository.get_repository),
    campaigns: TableRepository = Depends(repository.get_campaign_repository),
    settings: Settings = Depends(get_settings),
) -> dict:
    return await service.send_newsletter(
        payload,
        mailer=mailer,
        subscribers=subscribers,
        campaigns=campaigns,
        settings=settings,
    )


@router.get("/templates")
async def list_templates(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: TableRepository = Depends(repository.get_template_repository),
) -> dict:
    return await service.list_templates(repo, limit=limit, offset=offset)


@router.get("/templates/{template_id}")
async def get_template(
    template_id: str,
    repo: TableRepository = Depends(repository.get_template_repository),
) -> dict:
    return await service.get_template(repo, template_id)


@router.post("/templates", status_code=201)
async def create_template(
    payload: schemas.TemplateCreate,
    repo: TableRepository = Depends(repository.get_template_repository),
) -> dict:
    return await service.create_template(repo, payload)


@router.put("/templates/{template_id}")
async def update_template(
    template_id: str,
    payload: schemas.TemplateUpdate,
    repo: TableRepository = Depends(repository.get_template_repository),
) -> dict:
    return await service.update_template(repo, template_id, payload)


@router.delete("/templates/{template_id}")
async def delete_template(
    template_id: str,
    repo: TableRepository = Depends(repository.get_template_repository),
) -> dict:
    return await service.delete_template(repo, template_id)


@router.get("/campaigns")
async def list_campaigns(
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: TableRepository = Depends(repository.get_campaign_repository),
) -> dict:
    return await service.list_campaigns(repo, limit=limit, offset=offset)
