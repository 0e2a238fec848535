"""Public sprint discovery."""

from typing import List

from fastapi import APIRouter, Depends
from libs.db.session import get_async_db
from services.orchestration_service.routers.orchestration import get_registry
from services.orchestration_service.services.registry import OrchestrationRegistry
from services.sprints_service.schemas import DiscoverableSprintResponse
from services.sprints_service.services.catalog import discover_live_sprints
from services.sprints_service.services.sprint_store import live_view
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/sprints", tags=["discovery"])


@router.get("/discover", response_model=List[DiscoverableSprintResponse])
async def discover_sprints(
    db: AsyncSession = Depends(get_async_db),
    registry: OrchestrationRegistry = Depends(get_registry),
):
    """Approved sprints that currently occupy a lifecycle slot."""
    discovered = await discover_live_sprints(db, registry)
    return [
        {**live_view(d.sprint), "slot_id": d.slot_id, "stage": d.stage.value}
        for d in discovered
    ]
