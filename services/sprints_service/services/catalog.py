"""Two-tier sprint catalog: live database reads or a static seed dataset.

The tier is chosen by configuration. The two are never merged; discovery may
fall back to the seed tier on a database error only when that is enabled.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.orchestration_service.lifecycle import LifecycleStage
from services.orchestration_service.services.registry import (
    Assignments,
    OrchestrationRegistry,
    parse_assignments,
)
from services.sprints_service.models import Sprint
from services.sprints_service.seed import SEED_ASSIGNMENTS, build_seed_sprints
from services.sprints_service.services.sprint_store import list_published_sprints
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


class SprintCatalog(Protocol):
    async def list_published(self) -> List[Sprint]: ...

    async def get_assignments(self) -> Assignments: ...


class LiveSprintCatalog:
    def __init__(self, db: AsyncSession, registry: OrchestrationRegistry):
        self.db = db
        self.registry = registry

    async def list_published(self) -> List[Sprint]:
        return await list_published_sprints(self.db)

    async def get_assignments(self) -> Assignments:
        return await self.registry.get_orchestration()


class SeedSprintCatalog:
    def __init__(
        self,
        sprints: Optional[List[Sprint]] = None,
        assignments: Optional[dict] = None,
    ):
        self.sprints = sprints if sprints is not None else build_seed_sprints()
        self.assignments = parse_assignments(
            assignments if assignments is not None else SEED_ASSIGNMENTS
        )

    async def list_published(self) -> List[Sprint]:
        return list(self.sprints)

    async def get_assignments(self) -> Assignments:
        return dict(self.assignments)


@dataclass
class DiscoveredSprint:
    sprint: Sprint
    slot_id: str
    stage: LifecycleStage


def get_sprint_catalog(db: AsyncSession, registry: OrchestrationRegistry) -> SprintCatalog:
    if get_settings().SPRINT_CATALOG_SOURCE == "seed":
        return SeedSprintCatalog()
    return LiveSprintCatalog(db, registry)


async def _discover(catalog: SprintCatalog, registry: OrchestrationRegistry) -> List[DiscoveredSprint]:
    sprints = await catalog.list_published()
    assignments = await catalog.get_assignments()
    stages = registry.sprint_stage_map(assignments)
    slots = registry.sprint_slot_map(assignments)
    return [
        DiscoveredSprint(sprint=sprint, slot_id=slots[sprint.id], stage=stages[sprint.id])
        for sprint in registry.live_sprints(sprints, assignments)
    ]


async def discover_live_sprints(
    db: AsyncSession,
    registry: OrchestrationRegistry,
    catalog: Optional[SprintCatalog] = None,
) -> List[DiscoveredSprint]:
    """Publicly discoverable sprints: approved and occupying a slot."""
    catalog = catalog or get_sprint_catalog(db, registry)
    try:
        return await _discover(catalog, registry)
    except SQLAlchemyError as e:
        if not get_settings().DISCOVERY_SEED_FALLBACK or isinstance(catalog, SeedSprintCatalog):
            raise
        logger.warning("Live catalog unavailable, serving seed catalog: %s", e)
        await db.rollback()
        return await _discover(SeedSprintCatalog(), registry)
