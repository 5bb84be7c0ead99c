from __future__ import annotations

from dataclasses import dataclass

from masks.core.mutations import InventoryRemoved, InventoryUpserted, Mutation


@dataclass(slots=True)
class Inventory:
    """Item quantities keyed by item id.

    Invariant: no entry is ever stored with a quantity <= 0. A decrement that
    would reach zero (or below) removes the entry instead.
    """

    items: dict[str, int]

    def quantity(self, item_id: str) -> int:
        return self.items.get(item_id, 0)

    def has(self, item_id: str) -> bool:
        return self.quantity(item_id) > 0

    def has_all(self, item_ids: list[str]) -> bool:
        return all(self.has(i) for i in item_ids)

    def apply_delta(self, item_id: str, delta: int) -> Mutation | None:
        """Apply a signed quantity change.

        Returns the mutation performed, or None when nothing changed (a zero
        delta, or a removal of an item that isn't held).
        """

        existing = self.items.get(item_id)

        if delta > 0:
            quantity = (existing or 0) + delta
            self.items[item_id] = quantity
            return InventoryUpserted(item_id=item_id, delta=delta, quantity=quantity, created=existing is None)

        if delta < 0:
            if existing is None:
                return None
            if existing + delta <= 0:
                del self.items[item_id]
                return InventoryRemoved(item_id=item_id, previous=existing)
            self.items[item_id] = existing + delta
            return InventoryUpserted(item_id=item_id, delta=delta, quantity=existing + delta, created=False)

        return None
