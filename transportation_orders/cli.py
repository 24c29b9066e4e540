"""
Command-line interface for the transportation order server.
Provides commands for bulk loading, inspecting orders and serving the API.
"""

import logging
import os

import click

from .loader import OrderFileError
from .schemas import Settings, TransportationOrderSchema
from .service import OrderNotFoundError, TransportationOrderService, load_config


logger = logging.getLogger(__name__)


def _build_service(ctx) -> TransportationOrderService:
    settings = Settings()
    config_path = ctx.obj['config_path'] or settings.config_path
    config = load_config(config_path, settings)
    if ctx.obj['verbose']:
        config.logging.level = "DEBUG"
    return TransportationOrderService(config)


@click.group()
@click.option('--config', default=None, help='Configuration file path')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def main(ctx, config: str, verbose: bool):
    """Transportation Order Server CLI."""
    # Logging is configured by the service from params.yaml
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose
    # Tests may inject a ready-made service
    ctx.obj.setdefault('service', None)


def _service(ctx) -> TransportationOrderService:
    if ctx.obj['service'] is None:
        ctx.obj['service'] = _build_service(ctx)
    return ctx.obj['service']


@main.command('import-orders')
@click.argument('input_file', type=click.Path(exists=True, dir_okay=False))
@click.option('--clear', is_flag=True, help='Remove stored orders before loading')
@click.pass_context
def import_orders(ctx, input_file: str, clear: bool):
    """Bulk load orders from a newline-delimited JSON file."""
    service = _service(ctx)

    try:
        click.echo(f"Importing orders from {input_file}...")
        stats = service.import_orders(input_file, clear_existing=clear)
    except OrderFileError as e:
        raise click.ClickException(str(e))
    except Exception as e:
        logger.error(f"Import failed: {e}")
        raise click.ClickException(str(e))

    click.echo("\nImport completed:")
    click.echo(f"  Lines read: {stats.lines_read}")
    click.echo(f"  Orders saved: {stats.orders_saved}")
    if clear:
        click.echo(f"  Orders removed: {stats.orders_deleted}")

    if stats.errors:
        click.echo("\nErrors encountered:")
        for error in stats.errors:
            click.echo(f"  - {error}")


@main.command('list')
@click.pass_context
def list_orders(ctx):
    """List all stored orders."""
    service = _service(ctx)
    orders = service.list_orders()

    if not orders:
        click.echo("No orders stored.")
        return

    for order in sorted(orders, key=lambda o: o.truck):
        click.echo(
            f"{order.truck:<10} toid={order.toid:<6} "
            f"pickup=({order.pickup_lat:.5f}, {order.pickup_lon:.5f}) "
            f"delivery=({order.delivery_lat:.5f}, {order.delivery_lon:.5f})"
        )
    click.echo(f"\n{len(orders)} orders")


@main.command()
@click.argument('truck')
@click.pass_context
def show(ctx, truck: str):
    """Print the order assigned to TRUCK as JSON."""
    service = _service(ctx)

    try:
        order = service.get_order(truck)
    except OrderNotFoundError as e:
        click.echo(str(e), err=True)
        ctx.exit(1)

    schema = TransportationOrderSchema.model_validate(order)
    click.echo(schema.model_dump_json(by_alias=True, indent=2))


@main.command()
@click.pass_context
def status(ctx):
    """Show order store status."""
    service = _service(ctx)

    try:
        health = service.health_check()
    except Exception as e:
        logger.error(f"Status check failed: {e}")
        raise click.ClickException(str(e))

    click.echo(f"Status: {health['status']}")
    click.echo(f"Database: {'✓' if health['database_connected'] else '✗'}")
    click.echo(f"Orders: {health['orders']}")


@main.command()
@click.option('--host', default=None, help='Bind address (default from config)')
@click.option('--port', type=int, default=None, help='Port (default from config)')
@click.option('--reload', is_flag=True, help='Reload on code changes')
@click.pass_context
def serve(ctx, host: str, port: int, reload: bool):
    """Start the FastAPI server."""
    import uvicorn

    if ctx.obj['config_path']:
        # The app builds its own service from the environment
        os.environ["TO_CONFIG_PATH"] = ctx.obj['config_path']
    settings = Settings()
    config = load_config(settings.config_path, settings)
    host = host or config.server.host
    port = port or config.server.port

    click.echo("Starting Transportation Order Server...")
    click.echo(f"API documentation: http://{host}:{port}/docs")

    try:
        uvicorn.run("transportation_orders.api:app", host=host, port=port, reload=reload)
    except Exception as e:
        logger.error(f"Server failed to start: {e}")
        raise click.ClickException(str(e))


if __name__ == '__main__':
    main()
