"""Waitlist service - queueing interest in sold-out tiers and events."""

from collections.abc import Callable
from dataclasses import replace
from datetime import datetime
from uuid import UUID

import structlog

from ticketing.domain import EventId, TicketTier, TierId, WaitlistEntry, WaitlistEntryId
from ticketing.domain.errors import (
    AlreadyOnWaitlistError,
    EventNotFoundError,
    TierNotFoundError,
    WaitlistEntryNotFoundError,
)
from ticketing.domain.models import utcnow
from ticketing.services.identifiers import parse_id
from ticketing.stores.interfaces import TicketingStore

logger = structlog.get_logger(__name__)


class WaitlistService:
    """Service for event and tier waitlists.

    A waitlist is scoped to an event and optionally a tier; positions are
    assigned in insertion order within that scope, starting at 1.
    """

    def __init__(
        self, store: TicketingStore, clock: Callable[[], datetime] = utcnow
    ) -> None:
        self._store = store
        self._clock = clock

    def join(
        self,
        event_id: str | EventId,
        email: str,
        tier_id: str | TierId | None = None,
        name: str | None = None,
        user_id: UUID | None = None,
    ) -> WaitlistEntry:
        """Add an email to a waitlist.

        Raises:
            EventNotFoundError: If the event does not exist.
            TierNotFoundError: If the tier does not belong to the event.
            AlreadyOnWaitlistError: If the email is already queued in this scope.
        """
        event, tier = self._scope(event_id, tier_id)
        normalized = email.strip().lower()
        with self._store.atomic():
            entries = self._store.list_waitlist(event, tier)
            if any(entry.email == normalized for entry in entries):
                raise AlreadyOnWaitlistError(normalized)
            position = max((entry.position for entry in entries), default=0) + 1
            entry = self._store.save(
                WaitlistEntry(
                    id=WaitlistEntryId.new(),
                    event_id=event,
                    email=normalized,
                    position=position,
                    tier_id=tier,
                    name=name,
                    user_id=user_id,
                    created_at=self._clock(),
                )
            )
        logger.info("waitlist_joined", event_id=str(event), position=position)
        return entry

    def list_entries(
        self, event_id: str | EventId, tier_id: str | TierId | None = None
    ) -> list[WaitlistEntry]:
        event, tier = self._scope(event_id, tier_id)
        return self._store.list_waitlist(event, tier)

    def notify_next(
        self, event_id: str | EventId, tier_id: str | TierId | None = None
    ) -> WaitlistEntry | None:
        """Stamp the earliest entry that has not been notified or converted."""
        for entry in self.list_entries(event_id, tier_id):
            if entry.notified_at is None and not entry.converted_to_ticket:
                notified = self._store.save(replace(entry, notified_at=self._clock()))
                logger.info("waitlist_notified", entry_id=str(entry.id))
                return notified
        return None

    def mark_converted(self, entry_id: str | WaitlistEntryId) -> WaitlistEntry:
        parsed = parse_id(WaitlistEntryId, entry_id, "waitlist entry")
        entry = self._store.get(WaitlistEntry, parsed)
        if entry is None:
            raise WaitlistEntryNotFoundError(str(entry_id))
        return self._store.save(replace(entry, converted_to_ticket=True))

    def _scope(
        self, event_id: str | EventId, tier_id: str | TierId | None
    ) -> tuple[EventId, TierId | None]:
        event = parse_id(EventId, event_id, "event")
        if not self._store.event_exists(event):
            raise EventNotFoundError(str(event_id))
        if tier_id is None:
            return event, None
        tier = self._store.get(TicketTier, parse_id(TierId, tier_id, "tier"))
        if tier is None or tier.event_id != event:
            raise TierNotFoundError(str(tier_id))
        return event, tier.id
