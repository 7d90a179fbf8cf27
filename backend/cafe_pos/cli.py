# Overview: Flask CLI command groups for bootstrap and inspection.

# backend/cafe_pos/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap:
# - python -m flask system init-db
#   Create all tables that do not exist yet (use `flask db upgrade` in production).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
# - python -m flask system seed
#   Idempotent: default cashier plus a sample menu with snack stock.
#
# Users:
# - python -m flask users create-cashier --full-name "Sara" --email sara@coffee.com --password "secret"
# - python -m flask users list

from decimal import Decimal

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import Product, User
from .services.auth_service import AuthError, create_cashier, seed_default_cashier
from .services.inventory_service import adjust_inventory


SAMPLE_MENU = [
    # name, category, price_omr, initial stock (snacks only)
    ("Espresso", "coffee", "0.800", None),
    ("Cappuccino", "coffee", "1.300", None),
    ("Karak Tea", "tea", "0.300", None),
    ("Iced Latte", "cold_drink", "1.500", None),
    ("Croissant", "bakery", "0.700", None),
    ("Chips", "snack", "0.200", 40),
    ("Chocolate Bar", "snack", "0.350", 25),
]


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables."""
    db.create_all()
    click.echo("Database tables created.")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """Drop and recreate all tables."""
    if not yes:
        click.confirm('This deletes ALL data. Continue?', abort=True)
    db.drop_all()
    db.create_all()
    click.echo("Database reset.")


@system_group.command('seed')
@with_appcontext
def seed():
    """Default cashier and sample menu (skips anything that already exists)."""
    user, created = seed_default_cashier()
    click.echo(f"{'Created' if created else 'Found'} cashier {user.email} (id={user.id})")

    for name, category, price, stock in SAMPLE_MENU:
        if db.session.query(Product).filter_by(name=name).first():
            click.echo(f"  skip {name} (exists)")
            continue
        product = Product(name=name, category=category, price_omr=Decimal(price), is_active=True)
        db.session.add(product)
        db.session.commit()
        if stock:
            adjust_inventory(product_id=product.id, delta=stock)
        click.echo(f"  added {name} [{category}] {price} OMR" + (f", stock {stock}" if stock else ""))


@click.group('users')
def users_group():
    """Cashier account commands."""


@users_group.command('create-cashier')
@click.option('--full-name', prompt=True, help='Display name')
@click.option('--email', prompt=True, help='Login email')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@with_appcontext
def create_cashier_cli(full_name, email, password):
    try:
        user = create_cashier(full_name, email, password)
    except AuthError as e:
        raise click.ClickException(str(e))
    click.echo(f"Created cashier {user.email} (id={user.id})")


@users_group.command('list')
@with_appcontext
def list_users():
    users = db.session.query(User).order_by(User.id.asc()).all()
    if not users:
        click.echo("No users.")
        return
    for user in users:
        click.echo(f"{user.id:>4}  {user.email:<30} {user.full_name}")


def register_commands(app):
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
