"""
Subscriber API endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Response

from auth import dependencies as auth_dependencies

from . import repository, schemas, service
from .repository import SubscriberRepository

router = APIRouter(prefix="/subscribers", tags=["subscribers"])


@router.get("", dependencies=[Depends(auth_dependencies.require_admin)])
async def list_subscribers(
    subscribed: bool | None = Query(default=None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    repo: SubscriberRepository = Depends(repository.get_repository),
) -> dict:
    return await service.list_subscribers(repo, subscribed=subscribed, limit=limit, offset=offset)


@router.get("/count", dependencies=[Depends(auth_dependencies.require_public)])
async def count_subscribers(
    subscribed: bool = Query(default=True),
    repo: SubscriberRepository = Depends(repository.get_repository),
) -> dict:
    return await service.count_subscribers(repo, subscribed=subscribed)


@router.post("/subscribe", dependencies=[Depends(auth_dependencies.require_public)])
async def subscribe(
    payload: schemas.SubscribeRequest,
    response: Response,
    repo: SubscriberRepository = Depends(repository.get_repository),
) -> dict:
    body, created = await service.subscribe(repo, payload.email)
    response.status_code = 201 if created else 200
    return body


@router.post("/unsubscribe", dependencies=[Depends(auth_dependencies.require_public)])
async def unsubscribe(
    payload: schemas.UnsubscribeRequest,
    repo: SubscriberRepository = Depends(repository.get_repository),
) -> dict:
    return await service.unsubscribe(repo, payload.email)
