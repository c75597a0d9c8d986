"""Domain primitives that enforce validity at creation time."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Self
from uuid import UUID, uuid4

CENTS = Decimal("0.01")
ZERO = Decimal("0")


def to_cents(amount: Decimal) -> Decimal:
    """Round an amount to the currency minor unit, half-up."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class Identifier:
    """Base for UUID-backed identifiers."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def new(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class EventId(Identifier):
    """Unique identifier for an Event."""


@dataclass(frozen=True)
class FunctionId(Identifier):
    """Unique identifier for a function (sub-event) of an Event."""


@dataclass(frozen=True)
class TierId(Identifier):
    """Unique identifier for a TicketTier."""


@dataclass(frozen=True)
class TicketId(Identifier):
    """Unique identifier for a purchased Ticket."""


@dataclass(frozen=True)
class PromoCodeId(Identifier):
    """Unique identifier for a PromoCode."""


@dataclass(frozen=True)
class WaitlistEntryId(Identifier):
    """Unique identifier for a WaitlistEntry."""


@dataclass(frozen=True)
class Money:
    """Price representation with validation."""

    amount: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))
        if self.amount < 0:
            raise ValueError("Money amount cannot be negative")

    @classmethod
    def zero(cls) -> Self:
        return cls(amount=ZERO)

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    def __str__(self) -> str:
        return f"{self.amount:.2f}"


@dataclass(frozen=True)
class Capacity:
    """Non-negative integer representing capacity."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            raise ValueError("Capacity cannot be negative")


@dataclass(frozen=True)
class Quantity:
    """Positive number of tickets in a single order line."""

    value: int

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise ValueError("Quantity must be an integer")
        if self.value <= 0:
            raise ValueError("Quantity must be positive")
