"""Domain service: Reorder Advisor.

Read-only analysis of the stock ledger.  Medicines at or below their
low-stock threshold are given a suggested reorder quantity and grouped
by supplier so one purchase order per supplier can be raised.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from medstore.domain.model.medicine import Medicine
from medstore.domain.model.supplier import Supplier
from medstore.domain.model.value_objects import Money
from medstore.domain.repository.unit_of_work import UnitOfWork

MIN_SAFETY_STOCK = 50
ROUNDING_STEP = 10


def suggested_reorder_quantity(current_stock: int, threshold: int) -> int:
    """Top stock back up to a safety level, in multiples of ten.

    safety = max(2 * threshold, 50); suggestion = max(safety - current,
    threshold), rounded up to the next multiple of ten.
    """
    safety_stock = max(2 * threshold, MIN_SAFETY_STOCK)
    quantity = max(safety_stock - current_stock, threshold)
    return math.ceil(quantity / ROUNDING_STEP) * ROUNDING_STEP


@dataclass(frozen=True)
class ReorderSuggestion:
    medicine: Medicine
    suggested_quantity: int

    @property
    def estimated_cost(self) -> Money:
        return self.medicine.cost_price * self.suggested_quantity


@dataclass
class SupplierGroup:
    """Suggestions for one supplier; ``supplier`` is None for unassigned stock."""

    supplier: Supplier | None
    suggestions: list[ReorderSuggestion] = field(default_factory=list)

    @property
    def item_count(self) -> int:
        return len(self.suggestions)

    @property
    def total_cost(self) -> Money:
        if not self.suggestions:
            return Money.zero()
        return Money.total(
            (s.estimated_cost for s in self.suggestions),
            self.suggestions[0].estimated_cost.currency,
        )


class ReorderAdvisor:

    def __init__(self, uow: UnitOfWork) -> None:
        self._uow = uow

    def suggest(self, organization_id: str) -> list[SupplierGroup]:
        """Group every low-stock medicine under its active supplier.

        Returns an empty list when nothing needs reordering.  The
        unassigned group, if any, comes last.
        """
        groups: dict[int | None, SupplierGroup] = {}
        suppliers: dict[int, Supplier | None] = {}

        for medicine in self._uow.medicines.list_low_stock(organization_id):
            supplier = None
            if medicine.supplier_id is not None:
                if medicine.supplier_id not in suppliers:
                    suppliers[medicine.supplier_id] = self._uow.suppliers.get_by_id(
                        organization_id, medicine.supplier_id
                    )
                supplier = suppliers[medicine.supplier_id]
                if supplier is not None and not supplier.is_active:
                    supplier = None

            key = supplier.id if supplier else None
            group = groups.setdefault(key, SupplierGroup(supplier=supplier))
            group.suggestions.append(
                ReorderSuggestion(
                    medicine=medicine,
                    suggested_quantity=suggested_reorder_quantity(
                        medicine.quantity, medicine.low_stock_threshold
                    ),
                )
            )

        assigned = sorted(
            (g for g in groups.values() if g.supplier is not None),
            key=lambda g: g.supplier.name.lower(),  # type: ignore[union-attr]
        )
        unassigned = [g for g in groups.values() if g.supplier is None]
        return assigned + unassigned

    @staticmethod
    def plan_orders(
        groups: list[SupplierGroup],
        group_by_supplier: bool,
        min_order_value: Money,
    ) -> list[SupplierGroup]:
        """Batches worth turning into purchase orders.

        One batch per supplier when grouping, otherwise one per medicine.
        Batches below ``min_order_value`` and stock with no active
        supplier are skipped.
        """
        batches: list[SupplierGroup] = []
        for group in groups:
            if group.supplier is None:
                continue
            if group_by_supplier:
                candidates = [group]
            else:
                candidates = [SupplierGroup(group.supplier, [s]) for s in group.suggestions]
            for batch in candidates:
                if batch.total_cost.amount >= min_order_value.amount:
                    batches.append(batch)
        return batches
