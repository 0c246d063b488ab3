"""
Management commands for schema setup and ledger maintenance
"""
import click
from flask.cli import with_appcontext

from .extensions import db
from .services.inventory_ledger import LedgerEngine
from .store import Store


@click.command('init-db')
@with_appcontext
def init_db_command():
    """Create all tables (development aid; use `flask db upgrade` for deployments)"""
    db.create_all()
    click.echo("✅ Database tables created")


@click.command('verify-ledger')
@click.option('--product-id', type=int, default=None, help='Only check this product')
@with_appcontext
def verify_ledger_command(product_id):
    """Check that every product's quantity is explained by its ledger history"""
    discrepancies = LedgerEngine(Store.from_app()).verify(product_id)
    if not discrepancies:
        click.echo("✅ Ledger consistent with on-hand quantities")
        return

    for item in discrepancies:
        click.echo(
            f"❌ Product {item.product_id} ({item.sku}): quantity={item.quantity} "
            f"ledger_total={item.ledger_total} implied_initial={item.implied_initial} "
            f"- {'; '.join(item.problems)}"
        )
    raise SystemExit(1)


def register_commands(app):
    """Register CLI commands"""
    app.cli.add_command(init_db_command)
    app.cli.add_command(verify_ledger_command)
