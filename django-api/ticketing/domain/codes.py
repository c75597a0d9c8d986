"""Human-readable codes and payment handshake tokens.

Ticket numbers look like ``TKT-ABC1234``: three letters drawn from an alphabet
without the ambiguous I and O, then four digits (24**3 * 10**4 combinations).
Callers pass a ``random.Random`` to make generation deterministic; the default
source is the operating system's CSPRNG.
"""

import random
import secrets
import string

from ticketing.domain.value_objects import EventId, TicketId

TICKET_PREFIX = "TKT-"
TICKET_LETTERS = "ABCDEFGHJKLMNPQRSTUVWXYZ"
TICKET_DIGITS = string.digits

_system_random = secrets.SystemRandom()


def generate_ticket_number(rng: random.Random | None = None) -> str:
    rng = rng or _system_random
    letters = "".join(rng.choice(TICKET_LETTERS) for _ in range(3))
    digits = "".join(rng.choice(TICKET_DIGITS) for _ in range(4))
    return f"{TICKET_PREFIX}{letters}{digits}"


def qr_payload(event_id: EventId, ticket_id: TicketId) -> str:
    """Check-in payload encoded into the ticket's QR code."""
    return f"{event_id}:{ticket_id}"


def generate_payment_intent(rng: random.Random | None = None) -> tuple[str, str]:
    """Return a simulated ``(payment_intent_id, client_secret)`` pair."""
    rng = rng or _system_random
    alphabet = string.ascii_letters + string.digits
    intent_id = "pi_" + "".join(rng.choice(alphabet) for _ in range(24))
    secret = "".join(rng.choice(alphabet) for _ in range(24))
    return intent_id, f"{intent_id}_secret_{secret}"
