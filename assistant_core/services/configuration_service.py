"""Topic and behavior-rule management."""

import uuid
from typing import Optional, Sequence, Union

import structlog

from assistant_core.contracts.entities import BehaviorRule, Topic
from assistant_core.contracts.registry import validate, validate_patch
from assistant_core.services.classification import parse_keywords
from assistant_core.store import actions
from assistant_core.store.state import EntityKind
from assistant_core.store.store import Store

logger = structlog.get_logger(__name__)

Keywords = Union[str, Sequence[str]]


def _keywords(value: Keywords):
    if isinstance(value, str):
        return parse_keywords(value)
    return tuple(k.strip() for k in value if k.strip())


class ConfigurationService:
    """Edits the topics and behavior rules held by a store."""

    def __init__(self, store: Store):
        self.store = store

    # Topics

    def add_topic(self, name: str, keywords: Keywords = "", color: Optional[str] = None) -> Topic:
        """
        Create a topic.

        Args:
            name: Display name
            keywords: Comma-separated string or a sequence of keywords
            color: Hex color; the neutral default when omitted
        """
        fields = {"id": uuid.uuid4().hex, "name": name.strip(), "keywords": _keywords(keywords)}
        if color is not None:
            fields["color"] = color
        topic = validate(Topic, fields, "topic")

        self.store.dispatch(actions.add(EntityKind.TOPIC, topic))
        logger.info("Topic added", topic_id=topic.id, name=topic.name, keywords=len(topic.keywords))
        return topic

    def update_topic(
        self, topic_id: str, name: Optional[str] = None, keywords: Optional[Keywords] = None
    ) -> Optional[Topic]:
        updates = {}
        if name is not None:
            updates["name"] = name.strip()
        if keywords is not None:
            updates["keywords"] = _keywords(keywords)

        self.store.dispatch(
            actions.update(EntityKind.TOPIC, topic_id, validate_patch(Topic, updates))
        )
        return self.store.state.collection(EntityKind.TOPIC).get(topic_id)

    def delete_topic(self, topic_id: str) -> None:
        self.store.dispatch(actions.delete(EntityKind.TOPIC, topic_id))
        logger.info("Topic deleted", topic_id=topic_id)

    # Behavior rules

    def add_rule(self, name: str, condition: str, action: str) -> BehaviorRule:
        rule = validate(
            BehaviorRule,
            {
                "id": uuid.uuid4().hex,
                "name": name.strip(),
                "condition": condition.strip(),
                "action": action.strip(),
                "enabled": True,
            },
            "behavior_rule",
        )
        self.store.dispatch(actions.add(EntityKind.BEHAVIOR_RULE, rule))
        logger.info("Behavior rule added", rule_id=rule.id, name=rule.name)
        return rule

    def update_rule(self, rule_id: str, **updates) -> Optional[BehaviorRule]:
        self.store.dispatch(
            actions.update(
                EntityKind.BEHAVIOR_RULE, rule_id, validate_patch(BehaviorRule, updates)
            )
        )
        return self.store.state.collection(EntityKind.BEHAVIOR_RULE).get(rule_id)

    def toggle_rule(self, rule_id: str) -> Optional[BehaviorRule]:
        """Flip ``enabled``; a missing rule is left alone and None is returned."""
        rule = self.store.state.collection(EntityKind.BEHAVIOR_RULE).get(rule_id)
        if rule is None:
            return None
        return self.update_rule(rule_id, enabled=not rule.enabled)

    def delete_rule(self, rule_id: str) -> None:
        self.store.dispatch(actions.delete(EntityKind.BEHAVIOR_RULE, rule_id))
        logger.info("Behavior rule deleted", rule_id=rule_id)
