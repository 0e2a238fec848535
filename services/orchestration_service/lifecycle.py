"""Lifecycle curriculum configuration.

Slots and the category table are plain data handed to the registry through
``OrchestrationConfig`` so tests can swap in alternate layouts.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

from libs.common.config import get_settings


class LifecycleStage(str, enum.Enum):
    FOUNDATION = "Foundation"
    DIRECTION = "Direction"
    EXECUTION = "Execution"
    PROOF = "Proof"
    POSITIONING = "Positioning"
    STABILITY = "Stability"
    EXPANSION = "Expansion"


STAGE_DESCRIPTIONS: Dict[LifecycleStage, str] = {
    LifecycleStage.FOUNDATION: "Stabilising the person before direction or action.",
    LifecycleStage.DIRECTION: "Helping people understand who they are and where they're headed.",
    LifecycleStage.EXECUTION: "Doing the work daily and building momentum.",
    LifecycleStage.PROOF: "Turning effort into visible capability and outcomes.",
    LifecycleStage.POSITIONING: "How value is expressed, communicated, and perceived.",
    LifecycleStage.STABILITY: "Making progress sustainable and financially grounded.",
    LifecycleStage.EXPANSION: "Rebuilding, scaling, or evolving into a new chapter.",
}


class OrchestrationTrigger(str, enum.Enum):
    AFTER_HOMEPAGE = "after_homepage"
    SKIP_CLARITY = "skip_clarity"
    PAYMENT_HESITATION = "payment_hesitation"
    AFTER_1_SPRINT = "after_1_sprint"
    AFTER_1_PAID_SPRINT = "after_1_paid_sprint"
    AFTER_2_SPRINTS = "after_2_sprints"
    AFTER_2_PAID_SPRINTS = "after_2_paid_sprints"
    AFTER_3_SPRINTS = "after_3_sprints"


@dataclass(frozen=True)
class LifecycleSlot:
    id: str
    stage: LifecycleStage
    name: str
    slot_type: str
    # Foundation slots accept exactly one category; others go by the stage table
    required_category: Optional[str] = None


DEFAULT_SLOTS: Tuple[LifecycleSlot, ...] = (
    LifecycleSlot("slot_found_clarity", LifecycleStage.FOUNDATION, "Clarity", "Execution", "Clarity"),
    LifecycleSlot(
        "slot_found_orient", LifecycleStage.FOUNDATION, "Orientation", "Diagnostic", "Core Platform Sprint"
    ),
    LifecycleSlot(
        "slot_found_core", LifecycleStage.FOUNDATION, "Core", "Execution", "Growth Fundamentals"
    ),
    LifecycleSlot("slot_dir_primary", LifecycleStage.DIRECTION, "Mapping Slot", "Narrowing"),
    LifecycleSlot("slot_exec_primary", LifecycleStage.EXECUTION, "Mapping Slot", "Execution"),
    LifecycleSlot("slot_proof_primary", LifecycleStage.PROOF, "Mapping Slot", "Expression"),
    LifecycleSlot("slot_pos_primary", LifecycleStage.POSITIONING, "Mapping Slot", "Expression"),
    LifecycleSlot("slot_stab_primary", LifecycleStage.STABILITY, "Mapping Slot", "Stabilization"),
    LifecycleSlot("slot_exp_primary", LifecycleStage.EXPANSION, "Mapping Slot", "Expression"),
)


def _stage_map(stage: LifecycleStage, *categories: str) -> Dict[str, LifecycleStage]:
    return {category: stage for category in categories}


CATEGORY_TO_STAGE: Dict[str, LifecycleStage] = {
    **_stage_map(
        LifecycleStage.FOUNDATION,
        "Mindset",
        "Self-Belief",
        "Self-Trust",
        "Limiting Beliefs",
        "Emotional Resilience",
        "Emotional Intelligence",
        "Inner Work",
        "Mental Fitness",
        "Wellness",
        "Health",
        "Lifestyle",
        "Stress Management",
        "Energy Management",
        "Burnout Recovery",
        "Faith-Based",
        "Inner Peace",
        "Growth Fundamentals",
        "Core Platform Sprint",
    ),
    **_stage_map(
        LifecycleStage.DIRECTION,
        "Life",
        "Self-Discovery",
        "Identity",
        "Purpose",
        "Vision",
        "Clarity",
        "Purpose Alignment",
        "Meaning",
        "Consciousness",
    ),
    **_stage_map(
        LifecycleStage.EXECUTION,
        "Productivity",
        "Performance",
        "High Performance",
        "Focus",
        "Discipline",
        "Consistency",
        "Habits",
        "Accountability",
        "Time Management",
    ),
    **_stage_map(
        LifecycleStage.PROOF,
        "Career",
        "Professional Development",
        "Leadership",
        "Executive Development",
        "Transition",
        "Work-Life Balance",
    ),
    **_stage_map(
        LifecycleStage.POSITIONING,
        "Communication",
        "Interpersonal Skills",
        "Boundaries",
        "Conflict Resolution",
        "Connection",
        "Personal Branding",
        "Visibility",
        "Expression",
        "Thought Leadership",
        "Content Creation",
    ),
    **_stage_map(
        LifecycleStage.STABILITY,
        "Business",
        "Entrepreneurship",
        "Startup",
        "Founder",
        "Solopreneur",
        "Money Mindset",
        "Financial Empowerment",
        "Wealth Mindset",
    ),
    **_stage_map(
        LifecycleStage.EXPANSION,
        "Creativity",
        "Life Transitions",
        "Reinvention",
        "Change",
        "Reset",
        "Growth",
        "Transformation",
        "Relationships",
    ),
}

FOUNDATION_FOCUS_OPTIONS: Tuple[str, ...] = (
    "Get clarity on my career direction",
    "Build real-world skills before graduation",
    "Prepare for internships or entry roles",
    "Turn an interest into a real project",
    "Explore entrepreneurship seriously",
)

STAGE_FOCUS_OPTIONS: Tuple[str, ...] = (
    "Growth Acceleration",
    "Market Positioning",
    "Skill Deepening",
    "Portfolio Mastery",
)


@dataclass(frozen=True)
class OrchestrationConfig:
    slots: Tuple[LifecycleSlot, ...] = DEFAULT_SLOTS
    category_to_stage: Mapping[str, LifecycleStage] = field(
        default_factory=lambda: dict(CATEGORY_TO_STAGE)
    )
    foundation_focus_options: Tuple[str, ...] = FOUNDATION_FOCUS_OPTIONS
    stage_focus_options: Tuple[str, ...] = STAGE_FOCUS_OPTIONS
    strict_uniqueness: bool = False

    def get_slot(self, slot_id: str) -> Optional[LifecycleSlot]:
        for slot in self.slots:
            if slot.id == slot_id:
                return slot
        return None

    def slots_for_stage(self, stage: LifecycleStage) -> Tuple[LifecycleSlot, ...]:
        return tuple(slot for slot in self.slots if slot.stage == stage)

    def focus_options_for(self, stage: LifecycleStage) -> Tuple[str, ...]:
        if stage == LifecycleStage.FOUNDATION:
            return self.foundation_focus_options
        return self.stage_focus_options

    def stage_for_category(self, category: Optional[str]) -> Optional[LifecycleStage]:
        if not category:
            return None
        return self.category_to_stage.get(category)


def default_config() -> OrchestrationConfig:
    settings = get_settings()
    return OrchestrationConfig(strict_uniqueness=settings.ORCHESTRATION_STRICT_UNIQUENESS)
