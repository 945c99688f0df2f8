"""CLI commands for the PurchaseOrder aggregate."""

from __future__ import annotations

from datetime import datetime

import click

from medstore.application.approve_purchase_order import ApprovePurchaseOrderHandler
from medstore.application.cancel_purchase_order import CancelPurchaseOrderHandler
from medstore.application.create_purchase_order import CreatePurchaseOrderHandler
from medstore.application.delete_purchase_order import DeletePurchaseOrderHandler
from medstore.application.dto import PurchaseOrderItemSpec, ReceiveItemSpec
from medstore.application.list_purchase_orders import (
    ListPurchaseOrdersHandler,
    OverduePurchaseOrdersHandler,
    PurchaseOrderStatsHandler,
)
from medstore.application.mark_ordered import MarkOrderedHandler
from medstore.application.receive_purchase_order import ReceivePurchaseOrderHandler
from medstore.application.show_purchase_order import (
    PurchaseOrderHistoryHandler,
    ShowPurchaseOrderHandler,
)
from medstore.domain.exceptions import DomainException
from medstore.infrastructure.bootstrap import settings, unit_of_work
from medstore.infrastructure.cli.options import parse_int, parse_pairs, scoped


def _parse_items(raw: str) -> list[PurchaseOrderItemSpec]:
    """Parse '1:10:5.50,2:3:12' (medicine id, quantity, unit cost)."""
    return [
        PurchaseOrderItemSpec(
            medicine_id=parse_int(mid, "medicine id"),
            quantity=parse_int(qty, "quantity"),
            unit_cost=cost,
        )
        for mid, qty, cost in parse_pairs(raw, 3, "MedicineId:Quantity:UnitCost")
    ]


def _parse_received(raw: str | None) -> list[ReceiveItemSpec] | None:
    """Parse '1:10,2:5' (medicine id, received quantity); None means receive everything."""
    if not raw:
        return None
    return [
        ReceiveItemSpec(
            medicine_id=parse_int(mid, "medicine id"),
            received_quantity=parse_int(qty, "quantity"),
        )
        for mid, qty in parse_pairs(raw, 2, "MedicineId:Quantity")
    ]


def _display_order(dto) -> None:
    """Shared formatting for displaying a purchase order."""
    click.echo(f"{dto.po_number}  (id={dto.id}, status={dto.status})")
    click.echo(f"Supplier:  #{dto.supplier_id}")
    click.echo(f"Ordered:   {dto.order_date}")
    if dto.expected_delivery_date:
        overdue = "  OVERDUE" if dto.is_overdue else ""
        click.echo(f"Expected:  {dto.expected_delivery_date}{overdue}")
    if dto.actual_delivery_date:
        click.echo(f"Delivered: {dto.actual_delivery_date}")
    if dto.approved_by:
        click.echo(f"Approved:  by {dto.approved_by} for {dto.approved_amount}")
    click.echo()

    if dto.has_receipts:
        click.echo(
            f"  {'Medicine':<24} {'Qty':>5} {'Received':>9} {'Remaining':>10} {'Cost':>12} {'Total':>14}"
        )
        click.echo(f"  {'-'*79}")
        for item in dto.items:
            click.echo(
                f"  {item.medicine_name:<24} {item.quantity:>5} "
                f"{item.received_quantity:>9} {item.remaining_quantity:>10} "
                f"{item.unit_cost:>12} {item.line_total:>14}"
            )
        click.echo(f"  {'-'*79}")
    else:
        click.echo(f"  {'Medicine':<24} {'Qty':>5} {'Cost':>12} {'Total':>14}")
        click.echo(f"  {'-'*58}")
        for item in dto.items:
            click.echo(
                f"  {item.medicine_name:<24} {item.quantity:>5} {item.unit_cost:>12} {item.line_total:>14}"
            )
        click.echo(f"  {'-'*58}")

    click.echo(f"  {'Subtotal':<30} {dto.subtotal:>20}")
    click.echo(f"  {'Tax':<30} {dto.tax_amount:>20}")
    click.echo(f"  {'Discount':<30} {dto.discount_amount:>20}")
    click.echo(f"  {'Total':<30} {dto.total:>20}")
    if dto.has_receipts:
        click.echo(f"  Received {dto.progress_percentage}%")
    if dto.notes:
        click.echo()
        click.echo(f"Notes: {dto.notes}")


@click.command("create")
@scoped
@click.option("--supplier", "supplier_id", required=True, type=int, help="Supplier ID.")
@click.option("--items", required=True, help="Items as 'MedicineId:Qty:UnitCost,...'.")
@click.option("--tax", "tax_percent", default=None, help="Tax percent (0-100).")
@click.option("--discount", default=None, help="Discount amount.")
@click.option("--expected", type=click.DateTime(["%Y-%m-%d"]), default=None,
              help="Expected delivery date (defaults to supplier payment terms).")
@click.option("--notes", default=None)
def po_create(organization_id: str, actor_id: str | None, supplier_id: int, items: str,
              tax_percent: str | None, discount: str | None, expected: datetime | None,
              notes: str | None) -> None:
    """Create a new pending purchase order."""
    specs = _parse_items(items)
    handler = CreatePurchaseOrderHandler(
        unit_of_work(), default_payment_terms=settings().DEFAULT_PAYMENT_TERMS_DAYS
    )

    try:
        dto = handler.handle(
            organization_id=organization_id,
            actor_id=actor_id,
            supplier_id=supplier_id,
            items=specs,
            expected_delivery_date=expected.date() if expected else None,
            notes=notes,
            tax_percent=tax_percent,
            discount_amount=discount,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.po_number} created  (id={dto.id}, status={dto.status})")
    click.echo()
    _display_order(dto)


@click.command("show")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
def po_show(organization_id: str, actor_id: str | None, order_id: int) -> None:
    """Show details of a purchase order."""
    handler = ShowPurchaseOrderHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_order(dto)


@click.command("list")
@scoped
@click.option("--status", default=None, help="Filter by status.")
@click.option("--supplier", "supplier_id", type=int, default=None, help="Filter by supplier ID.")
@click.option("--from", "start", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--to", "end", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=10, show_default=True)
def po_list(organization_id: str, actor_id: str | None, status: str | None,
            supplier_id: int | None, start: datetime | None, end: datetime | None,
            page: int, limit: int) -> None:
    """List purchase orders, newest first."""
    handler = ListPurchaseOrdersHandler(unit_of_work())

    try:
        result = handler.handle(
            organization_id,
            status=status,
            supplier_id=supplier_id,
            start_date=start.date() if start else None,
            end_date=end.date() if end else None,
            page=page,
            limit=limit,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.orders:
        click.echo("No purchase orders found.")
        return

    click.echo(f"{'ID':<6} {'PO Number':<18} {'Supplier':>8} {'Status':<19} {'Date':<10} {'Total':>16}")
    click.echo("-" * 82)
    for o in result.orders:
        click.echo(
            f"{o.id:<6} {o.po_number:<18} {o.supplier_id:>8} {o.status:<19} "
            f"{o.order_date.isoformat():<10} {o.total:>16}"
        )
    click.echo(f"Page {result.page} of {result.total_pages} ({result.total} orders)")


@click.command("approve")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
@click.option("--amount", "approved_amount", default=None, help="Approved amount (defaults to total).")
@click.option("--notes", default=None)
def po_approve(organization_id: str, actor_id: str | None, order_id: int,
               approved_amount: str | None, notes: str | None) -> None:
    """Approve a pending purchase order."""
    handler = ApprovePurchaseOrderHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, order_id, actor_id=actor_id,
                             approved_amount=approved_amount, notes=notes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.po_number} approved for {dto.approved_amount}.")


@click.command("ordered")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
def po_ordered(organization_id: str, actor_id: str | None, order_id: int) -> None:
    """Mark an approved purchase order as sent to the supplier."""
    handler = MarkOrderedHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, order_id, actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.po_number} marked as ordered.")


@click.command("receive")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
@click.option("--items", default=None,
              help="Received quantities as 'MedicineId:Qty,...'. Omit to receive everything outstanding.")
@click.option("--all-or-nothing", is_flag=True, default=False,
              help="Roll back the whole receipt if any line fails.")
def po_receive(organization_id: str, actor_id: str | None, order_id: int,
               items: str | None, all_or_nothing: bool) -> None:
    """Receive goods against a purchase order (adds stock)."""
    specs = _parse_received(items)
    handler = ReceivePurchaseOrderHandler(
        unit_of_work(), strict_status=settings().STRICT_RECEIPT_STATUS
    )

    try:
        receipt = handler.handle(organization_id, order_id, items=specs, actor_id=actor_id,
                                 abort_on_line_failure=all_or_nothing)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Purchase order {receipt.order.po_number} {receipt.order.status} "
        f"({receipt.completeness}, {receipt.outcome})"
    )
    click.echo()
    click.echo(f"  {'Medicine':>8} {'Received':>9} {'Stock':>8}  Result")
    click.echo(f"  {'-'*45}")
    for line in receipt.lines:
        result = "ok" if line.ok else f"FAILED: {line.error}"
        stock = line.new_stock if line.new_stock is not None else "-"
        click.echo(f"  {line.medicine_id:>8} {line.received_quantity:>9} {stock:>8}  {result}")
    if receipt.failed_count:
        click.echo()
        click.echo(f"{receipt.failed_count} line(s) were not applied to stock.")


@click.command("cancel")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
@click.option("--reason", default=None, help="Cancellation reason.")
def po_cancel(organization_id: str, actor_id: str | None, order_id: int, reason: str | None) -> None:
    """Cancel a purchase order that has not been received."""
    handler = CancelPurchaseOrderHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, order_id, actor_id=actor_id, reason=reason)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order {dto.po_number} cancelled.")


@click.command("delete")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
def po_delete(organization_id: str, actor_id: str | None, order_id: int) -> None:
    """Delete a pending purchase order."""
    handler = DeletePurchaseOrderHandler(unit_of_work())

    try:
        handler.handle(organization_id, order_id, actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Purchase order #{order_id} deleted.")


@click.command("history")
@scoped
@click.option("--id", "order_id", required=True, type=int, help="Purchase order ID.")
def po_history(organization_id: str, actor_id: str | None, order_id: int) -> None:
    """Show status transitions and goods received for a purchase order."""
    handler = PurchaseOrderHistoryHandler(unit_of_work())

    try:
        changes, receipts = handler.handle(organization_id, order_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Status history:")
    for c in changes:
        click.echo(
            f"  {c.changed_at:%Y-%m-%d %H:%M}  {c.old_status or '-':<19} -> {c.new_status:<19} "
            f"{c.actor_id or 'system'}"
        )
    if receipts:
        click.echo()
        click.echo("Goods received:")
        for r in receipts:
            click.echo(
                f"  {r.received_at:%Y-%m-%d %H:%M}  medicine #{r.medicine_id:<6} "
                f"qty {r.received_quantity:<6} by {r.actor_id or 'system'}"
            )


@click.command("stats")
@scoped
@click.option("--supplier", "supplier_id", type=int, default=None, help="Limit to one supplier.")
def po_stats(organization_id: str, actor_id: str | None, supplier_id: int | None) -> None:
    """Purchase order count and value by status."""
    stats = PurchaseOrderStatsHandler(unit_of_work()).handle(organization_id, supplier_id)

    click.echo(f"Orders: {stats.total}   Value: {stats.total_value}")
    for status, count in sorted(stats.status_breakdown.items()):
        click.echo(f"  {status:<19} {count:>6}")


@click.command("overdue")
@scoped
def po_overdue(organization_id: str, actor_id: str | None) -> None:
    """List ordered purchase orders past their expected delivery date."""
    orders = OverduePurchaseOrdersHandler(unit_of_work()).handle(organization_id)

    if not orders:
        click.echo("No overdue purchase orders.")
        return

    for o in orders:
        click.echo(f"{o.po_number:<18} supplier #{o.supplier_id:<6} expected {o.expected_delivery_date}")
