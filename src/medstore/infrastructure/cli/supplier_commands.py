"""CLI commands for the Supplier aggregate."""

from __future__ import annotations

import click

from medstore.application.manage_suppliers import (
    AddSupplierHandler,
    ListSuppliersHandler,
    RemoveSupplierHandler,
    SupplierDetails,
    SupplierPurchaseSummaryHandler,
    ToggleSupplierHandler,
    UpdateSupplierHandler,
)
from medstore.domain.exceptions import DomainException
from medstore.infrastructure.bootstrap import settings, unit_of_work
from medstore.infrastructure.cli.options import scoped


def _supplier_fields(command):
    for decorator in reversed([
        click.option("--name", required=True, help="Supplier name."),
        click.option("--contact", "contact_person", default="", help="Contact person."),
        click.option("--email", default=None),
        click.option("--phone", default=None),
        click.option("--address", default=""),
        click.option("--credit-limit", default="0", show_default=True),
        click.option("--payment-terms", type=int, default=None,
                     help="Payment terms in days (drives the expected delivery date)."),
        click.option("--notes", default=None),
    ]):
        command = decorator(command)
    return command


def _details(name, contact_person, email, phone, address, credit_limit, payment_terms, notes):
    return SupplierDetails(
        name=name,
        contact_person=contact_person,
        email=email,
        phone=phone,
        address=address,
        credit_limit=credit_limit,
        payment_terms=(
            payment_terms if payment_terms is not None else settings().DEFAULT_PAYMENT_TERMS_DAYS
        ),
        notes=notes,
    )


def _display_supplier(dto) -> None:
    state = "active" if dto.is_active else "inactive"
    click.echo(f"Supplier #{dto.id} {dto.supplier_code}  '{dto.name}'  ({state})")
    if dto.contact_person:
        click.echo(f"Contact:       {dto.contact_person}")
    if dto.email:
        click.echo(f"Email:         {dto.email}")
    if dto.phone:
        click.echo(f"Phone:         {dto.phone}")
    click.echo(f"Credit limit:  {dto.credit_limit}")
    click.echo(f"Payment terms: {dto.payment_terms} days")


@click.command("add")
@scoped
@_supplier_fields
def supplier_add(organization_id: str, actor_id: str | None, **fields) -> None:
    """Register a new supplier."""
    handler = AddSupplierHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, _details(**fields), actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier #{dto.id} '{dto.name}' added with code {dto.supplier_code}")


@click.command("update")
@scoped
@click.option("--id", "supplier_id", required=True, type=int, help="Supplier ID.")
@_supplier_fields
def supplier_update(organization_id: str, actor_id: str | None, supplier_id: int, **fields) -> None:
    """Replace a supplier's editable details."""
    handler = UpdateSupplierHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, supplier_id, _details(**fields), actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier #{dto.id} '{dto.name}' updated")


@click.command("show")
@scoped
@click.option("--id", "supplier_id", required=True, type=int, help="Supplier ID.")
def supplier_show(organization_id: str, actor_id: str | None, supplier_id: int) -> None:
    """Show a supplier and its purchase summary."""
    handler = SupplierPurchaseSummaryHandler(unit_of_work())

    try:
        dto, stats = handler.handle(organization_id, supplier_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_supplier(dto)
    click.echo()
    click.echo(f"Purchase orders: {stats.total}   Value: {stats.total_value}")
    for status, count in sorted(stats.status_breakdown.items()):
        click.echo(f"  {status:<19} {count:>6}")


@click.command("list")
@scoped
@click.option("--active-only", is_flag=True, default=False)
@click.option("--search", default=None, help="Match name, code, email or contact.")
def supplier_list(organization_id: str, actor_id: str | None, active_only: bool,
                  search: str | None) -> None:
    """List suppliers."""
    suppliers = ListSuppliersHandler(unit_of_work()).handle(
        organization_id, active_only=active_only, search=search
    )

    if not suppliers:
        click.echo("No suppliers found.")
        return

    click.echo(f"{'ID':<6} {'Code':<16} {'Name':<24} {'Terms':>6} {'Active':>7}")
    click.echo("-" * 63)
    for s in suppliers:
        click.echo(
            f"{s.id:<6} {s.supplier_code:<16} {s.name:<24} {s.payment_terms:>6} "
            f"{'yes' if s.is_active else 'no':>7}"
        )


@click.command("toggle")
@scoped
@click.option("--id", "supplier_id", required=True, type=int, help="Supplier ID.")
def supplier_toggle(organization_id: str, actor_id: str | None, supplier_id: int) -> None:
    """Activate or deactivate a supplier."""
    handler = ToggleSupplierHandler(unit_of_work())

    try:
        dto = handler.handle(organization_id, supplier_id, actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier #{dto.id} is now {'active' if dto.is_active else 'inactive'}")


@click.command("remove")
@scoped
@click.option("--id", "supplier_id", required=True, type=int, help="Supplier ID.")
def supplier_remove(organization_id: str, actor_id: str | None, supplier_id: int) -> None:
    """Delete a supplier (deactivates it instead if purchase orders reference it)."""
    handler = RemoveSupplierHandler(unit_of_work())

    try:
        result = handler.handle(organization_id, supplier_id, actor_id=actor_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Supplier #{supplier_id} {result.value}.")
