"""In-memory implementation of the TicketingStore.

Used for single-device operation and for service tests that do not need a
database. ``atomic()`` restores the previous contents if the block raises.
"""

from collections.abc import Callable, Iterator
from contextlib import contextmanager

from ticketing.stores.interfaces import ENTITY_TYPES, E, TicketingStore


class InMemoryTicketingStore(TicketingStore):
    """Dictionary-backed store keyed by entity type and ID."""

    def __init__(self) -> None:
        self._rows: dict[type, dict[object, object]] = {
            model: {} for model in ENTITY_TYPES
        }
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = {model: dict(rows) for model, rows in self._rows.items()}
        self._depth = 1
        try:
            yield
        except BaseException:
            self._rows = snapshot
            raise
        finally:
            self._depth = 0

    def _table(self, model: type) -> dict[object, object]:
        try:
            return self._rows[model]
        except KeyError:
            raise TypeError(f"Unsupported entity type: {model.__name__}") from None

    def save(self, entity: E) -> E:
        self._table(type(entity))[entity.id] = entity
        return entity

    def get(self, model: type[E], entity_id: object) -> E | None:
        return self._table(model).get(entity_id)  # type: ignore[return-value]

    def delete(self, model: type[E], entity_id: object) -> bool:
        return self._table(model).pop(entity_id, None) is not None

    def find(
        self, model: type[E], predicate: Callable[[E], bool] | None = None
    ) -> list[E]:
        rows = list(self._table(model).values())
        if predicate is None:
            return rows  # type: ignore[return-value]
        return [row for row in rows if predicate(row)]  # type: ignore[arg-type]
