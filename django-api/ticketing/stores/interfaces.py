"""Store interfaces (repository pattern).

Stores must be swappable and return domain models. Concrete stores implement
the generic CRUD and predicate query primitives; the derived queries and the
cascade delete below are written against those primitives and may be
overridden with something faster.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from contextlib import AbstractContextManager
from dataclasses import replace
from typing import TypeVar

from ticketing.domain import (
    Event,
    EventId,
    PromoCode,
    Ticket,
    TicketTier,
    TierId,
    WaitlistEntry,
)
from ticketing.domain.errors import (
    InsufficientCapacityError,
    PromoCodeExhaustedError,
    TierNotFoundError,
)
from ticketing.domain.promotions import normalize_code

E = TypeVar("E", Event, TicketTier, Ticket, PromoCode, WaitlistEntry)

ENTITY_TYPES: tuple[type, ...] = (Event, TicketTier, Ticket, PromoCode, WaitlistEntry)


class TicketingStore(ABC):
    """Interface for ticketing persistence operations."""

    @abstractmethod
    def atomic(self) -> AbstractContextManager[None]:
        """Return a context manager grouping writes into one transaction."""
        ...

    @abstractmethod
    def save(self, entity: E) -> E:
        """Insert or replace an entity by ID and return it."""
        ...

    @abstractmethod
    def get(self, model: type[E], entity_id: object) -> E | None:
        """Return an entity by ID, or None if not found."""
        ...

    @abstractmethod
    def delete(self, model: type[E], entity_id: object) -> bool:
        """Delete an entity by ID. Returns False if it did not exist."""
        ...

    @abstractmethod
    def find(
        self, model: type[E], predicate: Callable[[E], bool] | None = None
    ) -> list[E]:
        """Return all entities of a type matching ``predicate``."""
        ...

    def event_exists(self, event_id: EventId) -> bool:
        return self.get(Event, event_id) is not None

    def list_events(self) -> list[Event]:
        """Return all events ordered by starts_at ascending."""
        return sorted(self.find(Event), key=lambda event: event.starts_at)

    def list_tiers(self, event_id: EventId) -> list[TicketTier]:
        """Return an event's tiers ordered by sort_order, then creation time."""
        tiers = self.find(TicketTier, lambda tier: tier.event_id == event_id)
        return sorted(tiers, key=lambda tier: (tier.sort_order, tier.created_at))

    def list_tickets(self, event_id: EventId) -> list[Ticket]:
        tickets = self.find(Ticket, lambda ticket: ticket.event_id == event_id)
        return sorted(tickets, key=lambda ticket: ticket.purchased_at)

    def find_tickets_by_payment_reference(self, reference: str) -> list[Ticket]:
        return self.find(Ticket, lambda ticket: ticket.payment_reference == reference)

    def ticket_number_exists(self, ticket_number: str) -> bool:
        return bool(
            self.find(Ticket, lambda ticket: ticket.ticket_number == ticket_number)
        )

    def find_promo_code(self, event_id: EventId, code: str) -> PromoCode | None:
        """Case-insensitive lookup of a code within one event."""
        wanted = normalize_code(code)
        matches = self.find(
            PromoCode,
            lambda promo: promo.event_id == event_id and promo.code == wanted,
        )
        return matches[0] if matches else None

    def list_waitlist(
        self, event_id: EventId, tier_id: TierId | None = None
    ) -> list[WaitlistEntry]:
        """Return the waitlist for one scope ordered by position."""
        entries = self.find(
            WaitlistEntry,
            lambda entry: entry.event_id == event_id and entry.tier_id == tier_id,
        )
        return sorted(entries, key=lambda entry: entry.position)

    def increment_sold_count(self, tier_id: TierId, quantity: int) -> TicketTier:
        """Add ``quantity`` to a tier's sold count without passing capacity.

        Raises:
            TierNotFoundError: If the tier does not exist.
            InsufficientCapacityError: If fewer than ``quantity`` tickets remain.
        """
        with self.atomic():
            tier = self.get(TicketTier, tier_id)
            if tier is None:
                raise TierNotFoundError(str(tier_id))
            if quantity > tier.remaining_count:
                raise InsufficientCapacityError(
                    str(tier_id), quantity, tier.remaining_count
                )
            return self.save(replace(tier, sold_count=tier.sold_count + quantity))

    def release_sold_count(self, tier_id: TierId, quantity: int) -> TicketTier:
        """Return ``quantity`` tickets to a tier's inventory."""
        with self.atomic():
            tier = self.get(TicketTier, tier_id)
            if tier is None:
                raise TierNotFoundError(str(tier_id))
            return self.save(
                replace(tier, sold_count=max(0, tier.sold_count - quantity))
            )

    def increment_promo_usage(self, promo: PromoCode) -> PromoCode:
        """Record one use of a promo code without passing its usage limit.

        Raises:
            PromoCodeExhaustedError: If the code has no uses left.
        """
        with self.atomic():
            current = self.get(PromoCode, promo.id) or promo
            if (
                current.usage_limit is not None
                and current.usage_count >= current.usage_limit
            ):
                raise PromoCodeExhaustedError(current.code)
            return self.save(replace(current, usage_count=current.usage_count + 1))

    def delete_event(self, event_id: EventId) -> bool:
        """Delete an event with its tickets, waitlist, promo codes and tiers.

        Dependents go first so that no ticket ever references a missing tier.
        """
        with self.atomic():
            if not self.event_exists(event_id):
                return False
            for model in (Ticket, WaitlistEntry, PromoCode, TicketTier):
                for entity in self.find(model, lambda e: e.event_id == event_id):
                    self.delete(model, entity.id)
            return self.delete(Event, event_id)
