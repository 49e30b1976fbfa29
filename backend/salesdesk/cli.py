# Overview: Flask CLI command groups for bootstrap, demo data and user inspection.

# backend/salesdesk/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init --email admin@example.com --name "Admin" --password "secret123"
#   Create all tables and the first admin user (idempotent).
# - python -m flask system seed-demo
#   Load the demo product catalogue and a few sales through the sale protocol.
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with role and active status.
# - python -m flask users create --email staff@example.com --name "Staff" --password "secret123" --role sales_staff
#   Create a user (prompts if options are omitted).

import click
from flask.cli import with_appcontext

from .extensions import db
from .gateways import PRODUCTS, get_gateway
from .models import User
from .permissions import ROLES, ROLE_ADMIN
from .services import auth_service, inventory_service, sales_service
from .services.auth_service import PasswordValidationError
from .validation import ConflictError, ValidationError

# (name, price_cents, cost_cents, stock)
DEMO_PRODUCTS = [
    ("Espresso Machine", 49_999, 30_000, 15),
    ("Coffee Beans (1kg)", 2_499, 1_200, 80),
    ("Milk Frother", 7_999, 4_500, 8),
    ("Tamper", 2_999, 1_000, 25),
    ("Digital Scale", 3_999, 2_000, 5),
]

# (product name, quantity)
DEMO_SALES = [
    ("Espresso Machine", 1),
    ("Coffee Beans (1kg)", 5),
    ("Tamper", 2),
    ("Coffee Beans (1kg)", 3),
]


@click.group('system')
def system_group():
    """System bootstrap commands."""


@system_group.command('init')
@click.option('--email', prompt=True, help='Admin email address')
@click.option('--name', prompt=True, default='Administrator', help='Admin display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Admin password')
@with_appcontext
def init_system(email, name, password):
    """
    Create database tables and the first admin user.

    Safe to re-run: tables are only created when missing and the admin is
    skipped if the email is already registered.
    """
    click.echo("START Initializing salesdesk...")

    db.create_all()
    click.echo("PASS Database tables ready")

    existing = db.session.query(User).filter_by(email=email.strip().lower()).first()
    if existing:
        click.echo(f"PASS Admin already exists: {existing.email} (ID: {existing.id})")
        return

    try:
        user = auth_service.create_user(email=email, name=name, password=password, role=ROLE_ADMIN)
    except (ValidationError, PasswordValidationError, ConflictError) as e:
        raise click.ClickException(str(e))

    click.echo(f"PASS Created admin: {user.email} (ID: {user.id})")
    click.echo("DONE")


@system_group.command('seed-demo')
@with_appcontext
def seed_demo():
    """Load demo products and record a few sales against them."""
    gateway = get_gateway()

    existing = {p["name"] for p in gateway.select(PRODUCTS)}
    by_name = {}
    for name, price_cents, cost_cents, stock in DEMO_PRODUCTS:
        if name in existing:
            click.echo(f"SKIP Product exists: {name}")
            continue
        product = inventory_service.create_product(gateway, payload={
            "name": name,
            "price_cents": price_cents,
            "cost_cents": cost_cents,
            "stock": stock,
        })
        by_name[name] = product
        click.echo(f"PASS Created product: {name} (ID: {product['id']}, stock {stock})")

    for name, quantity in DEMO_SALES:
        product = by_name.get(name)
        if product is None:
            continue
        sale = sales_service.record_sale(gateway, product_id=product["id"], quantity=quantity)
        click.echo(f"PASS Recorded sale {sale['id']}: {quantity} x {name}")

    click.echo("DONE")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--name', prompt=True, help='Display name')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(list(ROLES)), prompt=True, help='Role')
@with_appcontext
def create_user_cli(email, name, password, role):
    """Create a new user. Passwords need at least 6 characters."""
    try:
        user = auth_service.create_user(email=email, name=name, password=password, role=role)
    except (ValidationError, PasswordValidationError, ConflictError) as e:
        click.echo(f"FAIL {e}")
        return

    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = auth_service.list_users()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Name':<20} {'Email':<30} {'Active':<8} {'Role'}")
    click.echo("="*80)

    for user in users:
        active = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.name:<20} {user.email:<30} {active:<8} {user.role}")

    click.echo("="*80 + "\n")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
