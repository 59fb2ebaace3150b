"""
Server sync for Marvin's chat threads, meetings and emails.

Every response is decoded by the gateway before it reaches the store, so a
malformed server payload raises ``SchemaViolation`` and nothing is dispatched.
"""

import uuid
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union

import structlog

from assistant_core.contracts.chat import ChatSendResponse
from assistant_core.contracts.entities import ChatThread, DataMode, EmailSummary, MeetingSummary
from assistant_core.contracts.registry import validate, validate_patch
from assistant_core.data.gateway import AssistantGateway
from assistant_core.store import actions
from assistant_core.store.state import EntityKind
from assistant_core.store.store import Store

logger = structlog.get_logger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SyncService:
    """Keeps server-owned collections in the store up to date."""

    def __init__(self, store: Store, gateway: AssistantGateway):
        self.store = store
        self.gateway = gateway

    def refresh_threads(self) -> Tuple[ChatThread, ...]:
        threads = self.gateway.list_threads().threads
        self.store.dispatch(actions.set_all(EntityKind.CHAT_THREAD, threads))
        logger.info("Chat threads refreshed", count=len(threads), mode=self.gateway.mode.value)
        return threads

    def refresh_meetings(self) -> Tuple[MeetingSummary, ...]:
        meetings = self.gateway.list_meetings().meetings
        self.store.dispatch(actions.set_all(EntityKind.MEETING, meetings))
        logger.info("Meetings refreshed", count=len(meetings), mode=self.gateway.mode.value)
        return meetings

    def refresh_emails(self) -> Tuple[EmailSummary, ...]:
        emails = self.gateway.list_emails().emails
        self.store.dispatch(actions.set_all(EntityKind.EMAIL, emails))
        logger.info("Emails refreshed", count=len(emails), mode=self.gateway.mode.value)
        return emails

    def refresh_all(self) -> Dict[str, int]:
        return {
            "chatThreads": len(self.refresh_threads()),
            "meetings": len(self.refresh_meetings()),
            "emails": len(self.refresh_emails()),
        }

    def send_message(self, message: str, thread_id: Optional[str] = None) -> ChatSendResponse:
        """
        Send a chat message.

        Without ``thread_id`` the server opens a new thread, so the thread
        list is re-fetched; otherwise the existing thread is marked as
        updated now.
        """
        response = self.gateway.send_message(message, thread_id=thread_id)
        if thread_id is None:
            self.refresh_threads()
        else:
            self.store.dispatch(
                actions.update(EntityKind.CHAT_THREAD, thread_id, {"updated_at": _now()})
            )
        return response

    def create_thread(self, name: str) -> ChatThread:
        """Add a local thread ahead of the first message."""
        thread = validate(
            ChatThread, {"id": uuid.uuid4().hex, "name": name, "updatedAt": _now()}, "chat_thread"
        )
        self.store.dispatch(actions.add(EntityKind.CHAT_THREAD, thread))
        return thread

    def rename_thread(self, thread_id: str, name: str) -> Optional[ChatThread]:
        self.store.dispatch(
            actions.update(
                EntityKind.CHAT_THREAD,
                thread_id,
                validate_patch(ChatThread, {"name": name, "updatedAt": _now()}),
            )
        )
        return self.store.state.collection(EntityKind.CHAT_THREAD).get(thread_id)

    def delete_thread(self, thread_id: str) -> None:
        self.store.dispatch(actions.delete(EntityKind.CHAT_THREAD, thread_id))

    def set_data_mode(self, mode: Union[DataMode, str]) -> DataMode:
        """Switch between mock and live data; returns the mode now in effect."""
        previous = self.store.state.data_mode
        state = self.store.dispatch(actions.set_data_mode(mode))
        if state.data_mode != previous:
            logger.info("Data mode changed", previous=previous, current=state.data_mode)
        return DataMode(state.data_mode or DataMode.MOCK)
