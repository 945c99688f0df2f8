"""CLI commands for low-stock reorder suggestions."""

from __future__ import annotations

import click

from medstore.application.reorder_suggestions import (
    GenerateAutoPurchaseOrdersHandler,
    ListReorderSuggestionsHandler,
)
from medstore.domain.exceptions import DomainException
from medstore.infrastructure.bootstrap import settings, unit_of_work
from medstore.infrastructure.cli.options import scoped


@click.command("suggest")
@scoped
def reorder_suggest(organization_id: str, actor_id: str | None) -> None:
    """Show low-stock medicines grouped by supplier."""
    groups = ListReorderSuggestionsHandler(unit_of_work()).handle(organization_id)

    if not groups:
        click.echo("Nothing needs reordering.")
        return

    for group in groups:
        label = f"#{group.supplier_id} {group.supplier_name}" if group.supplier_id else group.supplier_name
        click.echo(f"{label}  ({group.item_count} item(s), {group.total_cost})")
        for line in group.items:
            click.echo(
                f"  {line.medicine_name:<24} stock {line.current_stock:>5}/{line.low_stock_threshold:<5} "
                f"order {line.suggested_quantity:>5}  {line.estimated_cost:>14}"
            )


@click.command("generate")
@scoped
@click.option("--per-medicine", is_flag=True, default=False,
              help="One purchase order per medicine instead of per supplier.")
@click.option("--min-value", default="0", show_default=True,
              help="Skip batches worth less than this.")
@click.option("--approve", "auto_approve", is_flag=True, default=False,
              help="Approve the generated orders immediately.")
def reorder_generate(organization_id: str, actor_id: str | None, per_medicine: bool,
                     min_value: str, auto_approve: bool) -> None:
    """Raise purchase orders from the reorder suggestions."""
    handler = GenerateAutoPurchaseOrdersHandler(
        unit_of_work(), default_payment_terms=settings().DEFAULT_PAYMENT_TERMS_DAYS
    )

    try:
        orders = handler.handle(
            organization_id,
            actor_id,
            group_by_supplier=not per_medicine,
            min_order_value=min_value,
            auto_approve=auto_approve,
        )
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not orders:
        click.echo("No purchase orders generated.")
        return

    for o in orders:
        click.echo(f"{o.po_number}  supplier #{o.supplier_id}  {len(o.items)} item(s)  {o.total}  ({o.status})")
    click.echo(f"{len(orders)} purchase order(s) generated.")
