import click

from dms.infrastructure.bootstrap import settings
from dms.infrastructure.cli.dispatch_commands import (
    dispatch_create,
    dispatch_delete,
    dispatch_list,
    dispatch_show,
    dispatch_stats,
    dispatch_update,
)
from dms.infrastructure.cli.inventory_commands import (
    inventory_remove,
    inventory_set,
    inventory_show,
)
from dms.infrastructure.logging_config import configure_logging


@click.group()
def cli() -> None:
    """DMS — Dispatch Management System"""
    configure_logging(settings())


@cli.group()
def dispatch() -> None:
    """Manage dispatches."""


@cli.group()
def inventory() -> None:
    """Manage inventory."""


@cli.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=8000, type=int, show_default=True)
def serve(host: str, port: int) -> None:
    """Run the HTTP API."""
    import uvicorn

    from dms.infrastructure.api.app import default_app

    uvicorn.run(default_app(), host=host, port=port, log_config=None)


# Register subcommands
dispatch.add_command(dispatch_create)
dispatch.add_command(dispatch_delete)
dispatch.add_command(dispatch_list)
dispatch.add_command(dispatch_show)
dispatch.add_command(dispatch_stats)
dispatch.add_command(dispatch_update)
inventory.add_command(inventory_remove)
inventory.add_command(inventory_set)
inventory.add_command(inventory_show)
