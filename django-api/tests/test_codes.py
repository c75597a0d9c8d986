"""Unit tests for ticket numbers, QR payloads and payment intents."""

import random
import re

from ticketing.domain import EventId, TicketId
from ticketing.domain.codes import (
    TICKET_LETTERS,
    generate_payment_intent,
    generate_ticket_number,
    qr_payload,
)

TICKET_NUMBER = re.compile(r"^TKT-[A-HJ-NP-Z]{3}[0-9]{4}$")


class TestTicketNumber:
    def test_format(self):
        for _ in range(200):
            number = generate_ticket_number()
            assert TICKET_NUMBER.match(number), number
            assert len(number) == 11

    def test_alphabet_excludes_ambiguous_letters(self):
        assert "I" not in TICKET_LETTERS
        assert "O" not in TICKET_LETTERS
        assert len(TICKET_LETTERS) == 24

    def test_seeded_source_is_deterministic(self):
        first = [generate_ticket_number(random.Random(42)) for _ in range(3)]
        second = [generate_ticket_number(random.Random(42)) for _ in range(3)]
        assert first == second

    def test_numbers_vary(self):
        rng = random.Random(1)
        numbers = {generate_ticket_number(rng) for _ in range(100)}
        assert len(numbers) > 95


class TestQrPayload:
    def test_joins_event_and_ticket(self):
        event_id, ticket_id = EventId.new(), TicketId.new()
        assert qr_payload(event_id, ticket_id) == f"{event_id}:{ticket_id}"


class TestPaymentIntent:
    def test_intent_and_secret_shape(self):
        intent_id, secret = generate_payment_intent(random.Random(3))
        assert re.fullmatch(r"pi_[A-Za-z0-9]{24}", intent_id)
        assert secret.startswith(f"{intent_id}_secret_")
        assert len(secret) == len(intent_id) + len("_secret_") + 24

    def test_intents_are_distinct(self):
        rng = random.Random(3)
        assert generate_payment_intent(rng)[0] != generate_payment_intent(rng)[0]
