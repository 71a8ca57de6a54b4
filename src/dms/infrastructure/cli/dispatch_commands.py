"""CLI commands for the Dispatch aggregate."""

from __future__ import annotations

from datetime import date, datetime

import click

from dms.application.create_dispatch import CreateDispatchHandler
from dms.application.delete_dispatch import DeleteDispatchHandler
from dms.application.dispatch_stats import DispatchStatsHandler
from dms.application.dto import (
    DispatchDTO,
    DispatchItemSpec,
    DispatchQuery,
    DispatchSpec,
    DispatchUpdateSpec,
)
from dms.application.list_dispatches import ListDispatchesHandler
from dms.application.show_dispatch import ShowDispatchHandler
from dms.application.update_dispatch import UpdateDispatchHandler
from dms.domain.exceptions import DomainException
from dms.infrastructure.bootstrap import (
    dispatch_repository,
    inventory_repository,
    settings,
)


def _parse_items(raw: str) -> list[DispatchItemSpec]:
    """Parse 'ITEM:QTY[:TYPE],...' into DispatchItemSpec list."""
    specs: list[DispatchItemSpec] = []
    for part in raw.split(","):
        part = part.strip()
        fields = part.split(":")
        if len(fields) not in (2, 3):
            raise click.BadParameter(
                f"Invalid item format '{part}'. Expected 'ItemId:Quantity[:Type]'."
            )
        item_id, qty_str = fields[0].strip(), fields[1].strip()
        try:
            qty = int(qty_str)
        except ValueError:
            raise click.BadParameter(f"Invalid quantity '{qty_str}' for item '{item_id}'.")
        item_type = fields[2].strip() if len(fields) == 3 else None
        specs.append(DispatchItemSpec(item_id=item_id, quantity=qty, item_type=item_type))
    return specs


def _display_dispatch(dto: DispatchDTO) -> None:
    """Shared formatting for displaying a dispatch."""
    click.echo(f"Dispatch #{dto.id}  (status={dto.status})")
    click.echo(f"Destination: {dto.destination}")
    if dto.customer_name:
        click.echo(f"Customer:    {dto.customer_name}")
    click.echo(f"Dispatched:  {dto.dispatch_date.isoformat()} by {dto.dispatched_by}")
    if dto.delivery_date:
        click.echo(f"Delivery:    {dto.delivery_date.isoformat()}")
    click.echo(f"Transport:   {dto.transport_mode} {dto.vehicle_number}".rstrip())
    click.echo()
    click.echo(f"  {'Code':<12} {'Item':<24} {'Type':<14} {'Qty':>6}")
    click.echo(f"  {'-'*59}")
    for item in dto.items:
        click.echo(
            f"  {item.item_code:<12} {item.item_name:<24} "
            f"{item.item_type or '-':<14} {item.quantity:>6}"
        )
    click.echo(f"  {'-'*59}")
    click.echo(f"  {'Total':<52} {dto.total_quantity:>6}")


@click.command("create")
@click.option("--destination", required=True, help="Where the goods are going.")
@click.option("--date", "dispatch_date", type=click.DateTime(["%Y-%m-%d"]),
              default=lambda: datetime.now().strftime("%Y-%m-%d"),
              help="Dispatch date (YYYY-MM-DD), defaults to today.")
@click.option("--items", required=True, help="Items as 'ItemId:Qty[:Type],...'.")
@click.option("--customer", default="", help="Customer name.")
@click.option("--vehicle", default="", help="Vehicle number.")
@click.option("--driver", default="", help="Driver name.")
@click.option("--by", "dispatched_by", default="", help="Who is dispatching.")
@click.option("--remarks", default="", help="Free-text remarks.")
def dispatch_create(
    destination: str,
    dispatch_date: datetime,
    items: str,
    customer: str,
    vehicle: str,
    driver: str,
    dispatched_by: str,
    remarks: str,
) -> None:
    """Create a dispatch (takes stock out of inventory)."""
    specs = _parse_items(items)
    cfg = settings()
    handler = CreateDispatchHandler(
        dispatch_repo=dispatch_repository(),
        inventory_repo=inventory_repository(),
        persist_attempts=cfg.persist_attempts,
        max_conflict_retries=cfg.max_conflict_retries,
    )
    spec = DispatchSpec(
        destination=destination,
        dispatch_date=dispatch_date.date(),
        customer_name=customer,
        vehicle_number=vehicle,
        driver_name=driver,
        dispatched_by=dispatched_by,
        remarks=remarks,
    )

    try:
        result = handler.handle(spec, specs)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Dispatch created — stock reserved.")
    _display_dispatch(result.dispatch)


@click.command("show")
@click.option("--id", "dispatch_id", required=True, type=int, help="Dispatch ID to display.")
def dispatch_show(dispatch_id: int) -> None:
    """Show details of an existing dispatch."""
    handler = ShowDispatchHandler(dispatch_repo=dispatch_repository())

    try:
        dto = handler.handle(dispatch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    _display_dispatch(dto)


@click.command("list")
@click.option("--status", default=None, help="Only this status.")
@click.option("--destination", default=None, help="Destination contains this text.")
@click.option("--from", "start_date", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--to", "end_date", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--search", default=None, help="Free-text search.")
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--limit", type=int, default=100, show_default=True)
def dispatch_list(
    status: str | None,
    destination: str | None,
    start_date: datetime | None,
    end_date: datetime | None,
    search: str | None,
    page: int,
    limit: int,
) -> None:
    """List dispatches, newest first."""
    handler = ListDispatchesHandler(dispatch_repo=dispatch_repository())
    query = DispatchQuery(
        status=status,
        destination=destination,
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
        search=search,
        page=page,
        limit=limit,
    )

    try:
        result = handler.handle(query)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if not result.dispatches:
        click.echo("No dispatches found.")
        return

    click.echo(f"{'ID':<6} {'Date':<11} {'Status':<11} {'Destination':<24} {'Qty':>6}")
    click.echo("-" * 62)
    for d in result.dispatches:
        click.echo(
            f"{d.id:<6} {d.dispatch_date.isoformat():<11} {d.status:<11} "
            f"{d.destination:<24} {d.total_quantity:>6}"
        )
    p = result.pagination
    click.echo(f"Page {p.current} of {p.total} ({p.count} dispatches)")


@click.command("update")
@click.option("--id", "dispatch_id", required=True, type=int, help="Dispatch ID to update.")
@click.option("--status", default=None, help="New status.")
@click.option("--delivery-date", type=click.DateTime(["%Y-%m-%d"]), default=None)
@click.option("--vehicle", default=None, help="Vehicle number.")
@click.option("--driver", default=None, help="Driver name.")
@click.option("--driver-contact", default=None, help="Driver phone.")
@click.option("--remarks", default=None, help="Remarks.")
def dispatch_update(
    dispatch_id: int,
    status: str | None,
    delivery_date: datetime | None,
    vehicle: str | None,
    driver: str | None,
    driver_contact: str | None,
    remarks: str | None,
) -> None:
    """Update status or logistics details of a dispatch."""
    handler = UpdateDispatchHandler(dispatch_repo=dispatch_repository())
    changes = DispatchUpdateSpec(
        status=status,
        delivery_date=delivery_date.date() if delivery_date else None,
        vehicle_number=vehicle,
        driver_name=driver,
        driver_contact=driver_contact,
        remarks=remarks,
    )

    try:
        dto = handler.handle(dispatch_id, changes)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Dispatch #{dto.id} updated (status={dto.status}).")


@click.command("delete")
@click.option("--id", "dispatch_id", required=True, type=int, help="Dispatch ID to delete.")
def dispatch_delete(dispatch_id: int) -> None:
    """Delete a dispatch (puts its stock back)."""
    handler = DeleteDispatchHandler(
        dispatch_repo=dispatch_repository(),
        inventory_repo=inventory_repository(),
        max_conflict_retries=settings().max_conflict_retries,
    )

    try:
        result = handler.handle(dispatch_id)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(
        f"Dispatch #{dispatch_id} deleted — restored "
        f"{result.restored_items} of {result.total_items} items."
    )
    for gap in result.gaps:
        click.echo(
            f"  warning: {gap.quantity} x {gap.item_code} not restored ({gap.reason})",
            err=True,
        )


@click.command("stats")
def dispatch_stats() -> None:
    """Show dispatch totals and the monthly trend."""
    stats = DispatchStatsHandler(dispatch_repo=dispatch_repository()).handle()
    s = stats.summary

    click.echo(f"Dispatches:   {s.total_dispatches}")
    click.echo(f"Lines:        {s.total_items}")
    click.echo(f"Units:        {s.total_quantity}")
    click.echo(f"Destinations: {len(s.unique_destinations)}")
    click.echo()
    for row in stats.status_breakdown:
        click.echo(f"  {row.status:<11} {row.count:>5} {row.total_quantity:>8}")
    click.echo()
    for month in stats.monthly_trends:
        label = date(month.year, month.month, 1).strftime("%b %Y")
        click.echo(f"  {label:<9} {month.count:>5} {month.total_quantity:>8}")
