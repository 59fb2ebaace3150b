"""Keyword topic classification for ingested files."""

from typing import Iterable, Optional, Tuple

from assistant_core.contracts.entities import Topic

GENERAL_TOPIC_NAME = "General"


def general_topic_id(topics: Iterable[Topic]) -> Optional[str]:
    for topic in topics:
        if topic.name.strip().lower() == GENERAL_TOPIC_NAME.lower():
            return topic.id
    return None


def classify(name: str, content: str, topics: Iterable[Topic]) -> Tuple[str, ...]:
    """
    Ids of the topics whose keywords occur in the file name or content.

    Matching is a case-insensitive substring test. A file that matches no
    keyword lands in the General topic, if the store still has one.
    """
    topics = list(topics)
    haystacks = (content.lower(), name.lower())

    matched = []
    for topic in topics:
        keywords = [k.lower() for k in topic.keywords if k.strip()]
        if any(keyword in text for keyword in keywords for text in haystacks):
            matched.append(topic.id)

    if not matched:
        fallback = general_topic_id(topics)
        if fallback is not None:
            matched.append(fallback)
    return tuple(matched)


def parse_keywords(raw: str) -> Tuple[str, ...]:
    """Split a comma-separated keyword field, dropping blanks."""
    return tuple(k.strip() for k in raw.split(",") if k.strip())
