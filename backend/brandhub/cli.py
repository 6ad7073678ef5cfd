# Overview: Flask CLI command groups for bootstrap, inspection, and moderation.

# backend/brandhub/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to the factory (PowerShell: $env:FLASK_APP="brandhub:create_app").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init-db
#   Create any missing tables (use "flask db upgrade" for migrated databases).
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list [--role brand]
#   List users with role and active status.
# - python -m flask users create --email admin@brandhub.local --password "Password123" --role admin
#   Create a user (prompts if options are omitted). The only way to create the first admin.
# - python -m flask users set-role owner@acme.com brand
#   Change a user's role.
#
# Brand moderation:
# - python -m flask brands list [--all]
#   List brands (active only unless --all).
# - python -m flask brands verify 3 [--undo]
#   Mark a brand verified (or clear the flag).
# - python -m flask brands deactivate 3 [--activate]
#   Hide a brand from public listings (or restore it).

import click
from flask.cli import with_appcontext

from .errors import BrandHubError
from .extensions import db
from .models import Brand, User
from .models.users import ROLES
from .services import auth_service, brand_service
from .services.concurrency import store_transaction


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init-db')
@with_appcontext
def init_db():
    """Create all tables that do not exist yet. Existing data is kept."""
    db.create_all()
    click.echo("PASS Database tables created")


@system_group.command('reset-db')
@click.option('--yes', is_flag=True, help='Skip confirmation')
@with_appcontext
def reset_db(yes):
    """
    DANGER: Drop all tables and recreate schema.

    This will DELETE ALL DATA!
    """
    if not yes:
        click.confirm("WARN This will DELETE ALL DATA. Are you sure?", abort=True)

    click.echo("DELETE  Dropping all tables...")
    db.drop_all()

    click.echo("BUILD  Creating all tables...")
    db.create_all()

    click.echo("PASS Database reset complete.")


@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('create')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), prompt=True, help='Role')
@click.option('--name', default=None, help='Display name')
@with_appcontext
def create_user_cli(email, password, role, name):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit
    """
    profile = {"name": name} if name else {}
    try:
        user = auth_service.create_user(email, password, role=role, **profile)
    except BrandHubError as e:
        click.echo(f"FAIL {e.message}")
        raise SystemExit(1)

    click.echo(f"PASS Created user {user.email} (ID: {user.id}, role: {user.role})")


@users_group.command('list')
@click.option('--role', type=click.Choice(ROLES), default=None, help='Filter by role')
@with_appcontext
def list_users(role):
    """List all users with their role and status."""
    users = auth_service.list_users(role=role)

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Email':<40} {'Role':<10} {'Active'}")
    click.echo("="*80)

    for user in users:
        active_str = "Yes" if user.is_active else "No"
        click.echo(f"{user.id:<5} {user.email:<40} {user.role:<10} {active_str}")

    click.echo("="*80 + "\n")


@users_group.command('set-role')
@click.argument('email')
@click.argument('role', type=click.Choice(ROLES))
@with_appcontext
def set_role_cli(email, role):
    """Change the role of the user with EMAIL."""
    user = auth_service.get_user_by_email(email)
    if user is None:
        click.echo(f"FAIL User '{email}' not found")
        raise SystemExit(1)

    auth_service.set_role(user.id, role)
    click.echo(f"PASS {user.email} is now {role}")


@click.group('brands')
def brands_group():
    """Brand inspection and moderation commands."""


@brands_group.command('list')
@click.option('--all', 'show_all', is_flag=True, help='Include deactivated brands')
@with_appcontext
def list_brands(show_all):
    """List brands with owner and moderation flags."""
    result = brand_service.list_brands(active_only=not show_all)

    if not result["items"]:
        click.echo("No brands found.")
        return

    click.echo("\n" + "="*90)
    click.echo(f"{'ID':<5} {'Name':<30} {'Owner':<35} {'Active':<8} {'Verified'}")
    click.echo("="*90)

    for item in result["items"]:
        owner = db.session.get(User, item["user_id"])
        active_str = "Yes" if item["is_active"] else "No"
        verified_str = "Yes" if item["is_verified"] else "No"
        click.echo(f"{item['id']:<5} {item['name'][:30]:<30} {owner.email:<35} {active_str:<8} {verified_str}")

    click.echo("="*90 + "\n")


def _set_flag(brand_id: int, field: str, value: bool) -> Brand | None:
    brand = db.session.get(Brand, brand_id)
    if brand is None:
        click.echo(f"FAIL Brand ID {brand_id} not found")
        return None
    with store_transaction():
        setattr(brand, field, value)
    return brand


@brands_group.command('verify')
@click.argument('brand_id', type=int)
@click.option('--undo', is_flag=True, help='Clear the verified flag instead')
@with_appcontext
def verify_brand(brand_id, undo):
    """Mark BRAND_ID as verified."""
    brand = _set_flag(brand_id, "is_verified", not undo)
    if brand is None:
        raise SystemExit(1)
    click.echo(f"PASS {brand.name} verified={brand.is_verified}")


@brands_group.command('deactivate')
@click.argument('brand_id', type=int)
@click.option('--activate', is_flag=True, help='Re-activate instead')
@with_appcontext
def deactivate_brand(brand_id, activate):
    """Hide BRAND_ID from public listings."""
    brand = _set_flag(brand_id, "is_active", activate)
    if brand is None:
        raise SystemExit(1)
    click.echo(f"PASS {brand.name} active={brand.is_active}")


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(brands_group)
