"""Helpers shared by the application handlers.

Loading orders under a lock, flushing status history and emitting
context-scoped log records.  Nothing here decides business rules.
"""

from __future__ import annotations

import logging
from typing import Any

from medstore.domain.exceptions import EntityNotFoundError
from medstore.domain.model.purchase_order import PurchaseOrder
from medstore.domain.repository.unit_of_work import UnitOfWork

audit_log = logging.getLogger("medstore.audit")


class ContextLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with the request context and exposes it as extras."""

    def process(self, msg: Any, kwargs: dict[str, Any]) -> tuple[Any, dict[str, Any]]:
        context = " ".join(f"{k}={v}" for k, v in self.extra.items() if v is not None)
        extra = dict(kwargs.get("extra") or {})
        extra.setdefault("context", dict(self.extra))
        kwargs["extra"] = extra
        return (f"[{context}] {msg}" if context else msg), kwargs


def scoped_logger(
    logger: logging.Logger | logging.LoggerAdapter | None,
    default_name: str,
    **context: Any,
) -> ContextLoggerAdapter:
    base = logger or logging.getLogger(default_name)
    if isinstance(base, logging.LoggerAdapter):
        merged = {**(base.extra or {}), **context}
        return ContextLoggerAdapter(base.logger, merged)
    return ContextLoggerAdapter(base, context)


def audit(action: str, organization_id: str, actor_id: str | None, **changes: Any) -> None:
    """Fire-and-forget audit record on the ``medstore.audit`` logger."""
    audit_log.info(
        "%s by %s",
        action,
        actor_id or "system",
        extra={
            "context": {
                "action": action,
                "organization_id": organization_id,
                "actor_id": actor_id,
                "changes": changes,
            }
        },
    )


def load_order(
    uow: UnitOfWork, organization_id: str, order_id: int, for_update: bool = False
) -> PurchaseOrder:
    order = uow.purchase_orders.get_by_id(organization_id, order_id, for_update=for_update)
    if order is None:
        raise EntityNotFoundError("Purchase order not found")
    return order


def save_order(uow: UnitOfWork, order: PurchaseOrder) -> None:
    """Persist the order and append any status transitions it recorded."""
    uow.purchase_orders.save(order)
    for change in order.pull_status_changes():
        uow.status_history.add(change)
