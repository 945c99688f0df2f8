import click

from medstore.infrastructure.cli.inventory_commands import (
    inventory_add,
    inventory_adjust,
    inventory_ledger,
    inventory_show,
)
from medstore.infrastructure.cli.purchase_order_commands import (
    po_approve,
    po_cancel,
    po_create,
    po_delete,
    po_history,
    po_list,
    po_ordered,
    po_overdue,
    po_receive,
    po_show,
    po_stats,
)
from medstore.infrastructure.cli.reorder_commands import reorder_generate, reorder_suggest
from medstore.infrastructure.cli.supplier_commands import (
    supplier_add,
    supplier_list,
    supplier_remove,
    supplier_show,
    supplier_toggle,
    supplier_update,
)
from medstore.infrastructure.logging import setup_logging


@click.group()
def cli() -> None:
    """Medstore — purchasing and stock ledger for a medical store"""
    setup_logging()


@cli.group("purchase-order")
def purchase_order() -> None:
    """Manage purchase orders."""


@cli.group()
def supplier() -> None:
    """Manage suppliers."""


@cli.group()
def inventory() -> None:
    """Manage medicines and stock."""


@cli.group()
def reorder() -> None:
    """Low-stock reorder suggestions."""


# Register subcommands
purchase_order.add_command(po_approve)
purchase_order.add_command(po_cancel)
purchase_order.add_command(po_create)
purchase_order.add_command(po_delete)
purchase_order.add_command(po_history)
purchase_order.add_command(po_list)
purchase_order.add_command(po_ordered)
purchase_order.add_command(po_overdue)
purchase_order.add_command(po_receive)
purchase_order.add_command(po_show)
purchase_order.add_command(po_stats)
supplier.add_command(supplier_add)
supplier.add_command(supplier_list)
supplier.add_command(supplier_remove)
supplier.add_command(supplier_show)
supplier.add_command(supplier_toggle)
supplier.add_command(supplier_update)
inventory.add_command(inventory_add)
inventory.add_command(inventory_adjust)
inventory.add_command(inventory_ledger)
inventory.add_command(inventory_show)
reorder.add_command(reorder_generate)
reorder.add_command(reorder_suggest)
