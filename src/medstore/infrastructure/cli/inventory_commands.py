"""CLI commands for the stock ledger."""

from __future__ import annotations

from datetime import datetime

import click

from medstore.application.add_medicine import AddMedicineHandler
from medstore.application.adjust_stock import AdjustStockHandler
from medstore.application.show_inventory import ShowInventoryHandler, ShowLedgerHandler
from medstore.domain.exceptions import DomainException
from medstore.infrastructure.bootstrap import unit_of_work
from medstore.infrastructure.cli.options import scoped


@click.command("add")
@scoped
@click.option("--name", required=True, help="Medicine name.")
@click.option("--quantity", type=int, default=0, show_default=True, help="Opening stock.")
@click.option("--cost", "cost_price", required=True, help="Cost price (e.g. 5.50).")
@click.option("--price", "selling_price", required=True, help="Selling price.")
@click.option("--manufacturer", default="")
@click.option("--batch", "batch_number", default="")
@click.option("--threshold", "low_stock_threshold", type=int, default=10, show_default=True)
@click.option("--expiry", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--supplier", "supplier_id", type=int, default=None, help="Preferred supplier ID.")
def inventory_add(organization_id: str, actor_id: str | None, name: str, quantity: int,
                  cost_price: str, selling_price: str, manufacturer: str, batch_number: str,
                  low_stock_threshold: int, expiry: datetime | None, supplier_id: int | None) -> None:
    """Register a medicine with its opening stock."""
    handler = AddMedicineHandler(unit_of_work())

    try:
        dto = handler.handle(
            organization_id,
            name=name,
            quantity=quantity,
            cost_price=cost_price,
            selling_price=selling_price,
            manufacturer=manufacturer,
            batch_number=batch_number,
            low_stock_threshold=low_stock_threshold,
            expiry_date=expiry.date() if expiry else None,
            supplier_id=supplier_id,
            actor_id=actor_id,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Medicine #{dto.id} '{dto.name}' added with {dto.quantity} in stock")


@click.command("show")
@scoped
@click.option("--low-stock", is_flag=True, default=False, help="Only medicines at or below threshold.")
def inventory_show(organization_id: str, actor_id: str | None, low_stock: bool) -> None:
    """Show current stock levels."""
    lines = ShowInventoryHandler(unit_of_work()).handle(organization_id, low_stock_only=low_stock)

    if not lines:
        click.echo("No medicines found.")
        return

    click.echo(f"{'ID':<6} {'Medicine':<24} {'Batch':<10} {'Stock':>7} {'Min':>5} {'Cost':>12}")
    click.echo("-" * 69)
    for m in lines:
        marker = "  LOW" if m.is_low_stock else ""
        click.echo(
            f"{m.id:<6} {m.name:<24} {m.batch_number:<10} {m.quantity:>7} "
            f"{m.low_stock_threshold:>5} {m.cost_price:>12}{marker}"
        )


@click.command("adjust")
@scoped
@click.option("--medicine", "medicine_id", required=True, type=int, help="Medicine ID.")
@click.option("--delta", required=True, type=int, help="Signed change, e.g. -5 or 20.")
@click.option("--reason", required=True, help="Why the stock changed.")
def inventory_adjust(organization_id: str, actor_id: str | None, medicine_id: int,
                     delta: int, reason: str) -> None:
    """Add or remove stock by hand."""
    handler = AdjustStockHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, medicine_id, delta, reason, actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Stock for '{dto.name}' is now {dto.quantity}")


@click.command("ledger")
@scoped
@click.option("--medicine", "medicine_id", required=True, type=int, help="Medicine ID.")
def inventory_ledger(organization_id: str, actor_id: str | None, medicine_id: int) -> None:
    """Show every stock movement of a medicine."""
    handler = ShowLedgerHandler(unit_of_work())

    try:
        entries = handler.handle(organization_id, medicine_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not entries:
        click.echo("No stock movements recorded.")
        return

    for e in entries:
        sign = "+" if e.transaction_type == "increment" else "-"
        click.echo(
            f"{e.created_at:%Y-%m-%d %H:%M}  {sign}{e.quantity:<6} -> {e.quantity_after:<6} "
            f"{e.reason}  [{e.reference or 'manual'}]"
        )
