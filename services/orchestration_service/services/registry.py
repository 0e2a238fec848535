"""Orchestration registry: which approved sprint serves which lifecycle slot."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from fastapi import HTTPException, status
from libs.auth.models import AdminUser
from libs.common.logging import get_logger
from libs.common.versioning import check_expected_version
from services.orchestration_service.lifecycle import (
    LifecycleSlot,
    LifecycleStage,
    OrchestrationConfig,
    OrchestrationTrigger,
    default_config,
)
from services.orchestration_service.models import (
    CURRENT_MAPPING_ID,
    OrchestrationMapping,
    OrchestratorLog,
)
from services.sprints_service.models import ApprovalStatus, Sprint
from services.sprints_service.services.sprint_store import list_sprints_by_ids
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)


@dataclass
class SlotAssignment:
    sprint_id: str
    focus_criteria: List[str] = field(default_factory=list)

    def to_json(self) -> dict:
        return {"sprint_id": self.sprint_id, "focus_criteria": list(self.focus_criteria)}

    @classmethod
    def from_json(cls, data: Mapping) -> "SlotAssignment":
        return cls(
            sprint_id=data.get("sprint_id") or "",
            focus_criteria=list(data.get("focus_criteria") or []),
        )


@dataclass
class Resolution:
    slot_id: str
    sprint_id: str
    stage: LifecycleStage


Assignments = Dict[str, SlotAssignment]


def parse_assignments(raw: Optional[Mapping]) -> Assignments:
    parsed = {}
    for slot_id, data in (raw or {}).items():
        assignment = SlotAssignment.from_json(data or {})
        if assignment.sprint_id:
            parsed[slot_id] = assignment
    return parsed


def stage_map_for(
    assignments: Assignments, slots: Sequence[LifecycleSlot]
) -> Dict[str, LifecycleStage]:
    """sprint_id -> stage of the slot it occupies (first slot in config order)."""
    stages: Dict[str, LifecycleStage] = {}
    for slot in slots:
        assignment = assignments.get(slot.id)
        if assignment and assignment.sprint_id and assignment.sprint_id not in stages:
            stages[assignment.sprint_id] = slot.stage
    return stages


def _dedupe(values: Iterable[str]) -> List[str]:
    seen = []
    for value in values:
        if value and value not in seen:
            seen.append(value)
    return seen


class OrchestrationRegistry:
    """Reads and writes the global slot mapping.

    Slot layout and category rules come from ``config``; nothing is read from
    module state at call time.
    """

    def __init__(self, db: AsyncSession, config: Optional[OrchestrationConfig] = None):
        self.db = db
        self.config = config or default_config()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def _load_mapping(self, for_update: bool = False) -> Optional[OrchestrationMapping]:
        query = select(OrchestrationMapping).where(
            OrchestrationMapping.id == CURRENT_MAPPING_ID
        )
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def get_orchestration(self) -> Assignments:
        mapping = await self._load_mapping()
        if not mapping:
            return {}
        return parse_assignments(mapping.assignments)

    async def get_version(self) -> int:
        mapping = await self._load_mapping()
        return mapping.version if mapping else 0

    def require_slot(self, slot_id: str) -> LifecycleSlot:
        slot = self.config.get_slot(slot_id)
        if not slot:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Unknown lifecycle slot: {slot_id}",
            )
        return slot

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def assign(
        self,
        slot_id: str,
        sprint_id: Optional[str],
        focus_criteria: Sequence[str],
        actor: AdminUser,
        expected_version: Optional[int] = None,
    ) -> OrchestrationMapping:
        """Set one slot. An empty ``sprint_id`` clears it."""
        self.require_slot(slot_id)
        mapping = await self._lock_mapping()
        assignments = parse_assignments(mapping.assignments)
        if sprint_id:
            assignments[slot_id] = SlotAssignment(sprint_id, list(focus_criteria or []))
        else:
            assignments.pop(slot_id, None)
        return await self._commit(mapping, assignments, actor, expected_version)

    async def save(
        self,
        assignments: Mapping[str, SlotAssignment],
        actor: AdminUser,
        expected_version: Optional[int] = None,
    ) -> OrchestrationMapping:
        """Replace the whole mapping in one write."""
        for slot_id in assignments:
            self.require_slot(slot_id)
        mapping = await self._lock_mapping()
        return await self._commit(
            mapping,
            {k: v for k, v in assignments.items() if v.sprint_id},
            actor,
            expected_version,
        )

    async def _lock_mapping(self) -> OrchestrationMapping:
        mapping = await self._load_mapping(for_update=True)
        if mapping is None:
            mapping = OrchestrationMapping(id=CURRENT_MAPPING_ID, assignments={}, version=0)
            self.db.add(mapping)
        return mapping

    async def _commit(
        self,
        mapping: OrchestrationMapping,
        assignments: Assignments,
        actor: AdminUser,
        expected_version: Optional[int],
    ) -> OrchestrationMapping:
        try:
            check_expected_version(mapping.version or 0, expected_version, "Orchestration")
            await self._validate_sprints(assignments)
            self._check_uniqueness(assignments)
        except HTTPException:
            await self.db.rollback()
            raise

        mapping.assignments = {
            slot_id: SlotAssignment(
                a.sprint_id, _dedupe(a.focus_criteria)
            ).to_json()
            for slot_id, a in assignments.items()
        }
        mapping.version = (mapping.version or 0) + 1
        mapping.updated_by = actor.user_id
        await self.db.commit()
        await self.db.refresh(mapping)
        logger.info(
            "Orchestration v%d saved by %s (%d slots assigned)",
            mapping.version,
            actor.user_id,
            len(mapping.assignments),
        )
        return mapping

    async def _validate_sprints(self, assignments: Assignments) -> None:
        sprint_ids = _dedupe(a.sprint_id for a in assignments.values())
        found = {s.id for s in await list_sprints_by_ids(self.db, sprint_ids) if not s.deleted}
        missing = [sid for sid in sprint_ids if sid not in found]
        if missing:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Sprint not found: {', '.join(missing)}",
            )

    def _check_uniqueness(self, assignments: Assignments) -> None:
        holders: Dict[str, List[str]] = {}
        for slot_id, assignment in assignments.items():
            holders.setdefault(assignment.sprint_id, []).append(slot_id)
        duplicates = {sid: slots for sid, slots in holders.items() if len(slots) > 1}
        if not duplicates:
            return
        if self.config.strict_uniqueness:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": "A sprint may occupy at most one slot",
                    "duplicates": duplicates,
                },
            )
        logger.warning("Sprint assigned to multiple slots: %s", duplicates)

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    def eligible_sprints(
        self, slot_id: str, sprints: Iterable[Sprint], assignments: Assignments
    ) -> List[Sprint]:
        """Sprints that may be offered for ``slot_id``.

        The slot's current occupant is always eligible for it; sprints held by
        another slot are not.
        """
        slot = self.require_slot(slot_id)
        current = assignments.get(slot_id)
        occupant_id = current.sprint_id if current else None
        held_elsewhere = {
            a.sprint_id for other, a in assignments.items() if other != slot_id
        }

        eligible = []
        for sprint in sprints:
            if sprint.deleted:
                continue
            if sprint.id == occupant_id:
                eligible.append(sprint)
                continue
            if not (sprint.approval_status == ApprovalStatus.APPROVED or sprint.published):
                continue
            if sprint.id in held_elsewhere:
                continue
            if slot.required_category is not None:
                if sprint.category != slot.required_category:
                    continue
            elif self.config.stage_for_category(sprint.category) != slot.stage:
                continue
            eligible.append(sprint)
        return eligible

    def sprint_stage_map(self, assignments: Assignments) -> Dict[str, LifecycleStage]:
        return stage_map_for(assignments, self.config.slots)

    def sprint_slot_map(self, assignments: Assignments) -> Dict[str, str]:
        slots: Dict[str, str] = {}
        for slot in self.config.slots:
            assignment = assignments.get(slot.id)
            if assignment and assignment.sprint_id and assignment.sprint_id not in slots:
                slots[assignment.sprint_id] = slot.id
        return slots

    def is_live(self, sprint: Sprint, assignments: Assignments) -> bool:
        """Publicly discoverable: approved and occupying some slot."""
        return (
            not sprint.deleted
            and sprint.approval_status == ApprovalStatus.APPROVED
            and sprint.id in self.sprint_stage_map(assignments)
        )

    def live_sprints(self, sprints: Iterable[Sprint], assignments: Assignments) -> List[Sprint]:
        return [sprint for sprint in sprints if self.is_live(sprint, assignments)]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    async def resolve_for_focus(
        self,
        user_id: str,
        stage: LifecycleStage,
        focus: Optional[str],
        trigger: OrchestrationTrigger,
    ) -> Optional[Resolution]:
        """Pick the live sprint serving ``stage`` for a participant's focus.

        Slots whose focus criteria include ``focus`` win; otherwise the first
        live slot of the stage is used.
        """
        assignments = await self.get_orchestration()
        candidates = [
            (slot, assignments[slot.id])
            for slot in self.config.slots_for_stage(stage)
            if slot.id in assignments
        ]
        sprints = await list_sprints_by_ids(self.db, [a.sprint_id for _, a in candidates])
        live_ids = {s.id for s in self.live_sprints(sprints, assignments)}
        candidates = [(slot, a) for slot, a in candidates if a.sprint_id in live_ids]

        chosen = None
        if focus:
            chosen = next((c for c in candidates if focus in c[1].focus_criteria), None)
        if chosen is None and candidates:
            chosen = candidates[0]

        resolution = (
            Resolution(slot_id=chosen[0].id, sprint_id=chosen[1].sprint_id, stage=stage)
            if chosen
            else None
        )
        await self._log_resolution(user_id, trigger, focus, resolution)
        return resolution

    async def _log_resolution(
        self,
        user_id: str,
        trigger: OrchestrationTrigger,
        focus: Optional[str],
        resolution: Optional[Resolution],
    ) -> None:
        try:
            self.db.add(
                OrchestratorLog(
                    user_id=user_id,
                    trigger=trigger.value,
                    input_focus=focus,
                    resolved_sprint_id=resolution.sprint_id if resolution else None,
                    slot_id=resolution.slot_id if resolution else None,
                )
            )
            await self.db.commit()
        except Exception as e:
            await self.db.rollback()
            logger.error("Failed to log orchestration resolution for %s: %s", user_id, e)
