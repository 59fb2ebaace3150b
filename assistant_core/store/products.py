"""Erika and Marvin: the two product profiles and their seed data."""

from __future__ import annotations

from typing import Dict, List

from assistant_core.contracts.base import WireModel
from assistant_core.contracts.entities import BehaviorRule, Topic
from assistant_core.core.exceptions import ConfigurationError
from assistant_core.store.state import (
    BEHAVIOR_RULES,
    CHAT_THREADS,
    EMAILS,
    FILES,
    MEETINGS,
    TOPICS,
    EntityKind,
    ProductProfile,
)

GENERAL_TOPIC_ID = "4"


def default_topics() -> List[Topic]:
    return [
        Topic(id="1", name="Strategy", keywords=("strategic", "plan", "vision", "goals"), color="#3b82f6"),
        Topic(id="2", name="Finance", keywords=("budget", "revenue", "cost", "profit"), color="#10b981"),
        Topic(
            id="3",
            name="Operations",
            keywords=("process", "workflow", "efficiency", "operations"),
            color="#f59e0b",
        ),
        Topic(id=GENERAL_TOPIC_ID, name="General", keywords=(), color="#6b7280"),
    ]


def default_behavior_rules() -> List[BehaviorRule]:
    return [
        BehaviorRule(
            id="1",
            name="Executive Tone",
            condition="all_outputs",
            action="use_executive_language",
            enabled=True,
        ),
        BehaviorRule(
            id="2", name="No Emojis", condition="all_outputs", action="remove_emojis", enabled=True
        ),
        BehaviorRule(
            id="3",
            name="MECE Structure",
            condition="strategic_content",
            action="apply_mece_framework",
            enabled=True,
        ),
    ]


def _seed() -> Dict[EntityKind, List[WireModel]]:
    return {
        EntityKind.TOPIC: default_topics(),
        EntityKind.BEHAVIOR_RULE: default_behavior_rules(),
    }


ERIKA = ProductProfile(
    name="erika",
    collections=(FILES, TOPICS, BEHAVIOR_RULES),
    snapshot_contract="snapshot.erika",
    seed=_seed,
)

MARVIN = ProductProfile(
    name="marvin",
    collections=(FILES, TOPICS, BEHAVIOR_RULES, CHAT_THREADS, MEETINGS, EMAILS),
    snapshot_contract="snapshot.marvin",
    has_data_mode=True,
    seed=_seed,
)

PROFILES: Dict[str, ProductProfile] = {profile.name: profile for profile in (ERIKA, MARVIN)}


def get_profile(name: str) -> ProductProfile:
    """Look up a product profile by name (case-insensitive)."""
    try:
        return PROFILES[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown product '{name}' (expected one of {', '.join(PROFILES)})") from None
