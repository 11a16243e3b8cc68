# Overview: Flask CLI command groups for bootstrap, inspection, and maintenance.

# backend/storefront/cli.py
# Commands Legend (run from the backend directory):
# Prereqs:
# - Activate your virtualenv.
# - Set FLASK_APP to wsgi.py (PowerShell: $env:FLASK_APP="wsgi.py").
# - Use: python -m flask <group> <command> [options]
#
# System bootstrap/repair:
# - python -m flask system init
#   Idempotent bootstrap: creates tables and the default admin/manager/customer users.
# - python -m flask system reset-db --yes
#   DEV/TEST only: drop and recreate all tables (deletes all data).
#
# User inspection/bootstrap:
# - python -m flask users list
#   List all users with their roles.
# - python -m flask users create --username admin --email admin@shop.local --password "Password123" --role admin
#   Create a user (prompts if options are omitted).
# - python -m flask users set-role 3 manager
#   Change a user's role.
#
# Catalog inspection:
# - python -m flask categories tree [--root electronics]
#   Print the category tree.

import click
from flask.cli import with_appcontext

from .extensions import db
from .models import User, ROLES
from .services.auth_service import create_user, set_role, PasswordValidationError
from .services import category_service
from .validation import ValidationError, NotFoundError


@click.group('system')
def system_group():
    """System bootstrap and repair commands."""


@system_group.command('init')
@with_appcontext
def init_system():
    """
    Initialize the store backend: schema and default users.

    Creates:
    - All tables (no-op for tables that already exist)
    - Users: admin/admin@shop.local, manager/manager@shop.local, customer/customer@shop.local
    - All passwords default to: "Password123"

    SECURITY: Change passwords immediately in production!
    """
    click.echo("START Initializing storefront...")

    db.create_all()
    click.echo("PASS Schema ready")

    click.echo("\nUSERS Creating default users...")
    default_password = "Password123"

    default_users = [
        ("admin", "admin@shop.local", "admin"),
        ("manager", "manager@shop.local", "manager"),
        ("customer", "customer@shop.local", "customer"),
    ]

    for username, email, role in default_users:
        existing = db.session.query(User).filter_by(username=username).first()
        if existing:
            click.echo(f"WARN  User '{username}' already exists, skipping...")
            continue

        try:
            create_user(username=username, email=email, password=default_password, role=role)
            click.echo(f"PASS Created user: {username} ({email}) with role '{role}'")
        except ValidationError as e:
            click.echo(f"FAIL Failed to create user '{username}': {str(e)}")

    click.echo("\n" + "="*60)
    click.echo("DONE Storefront Initialized Successfully!")
    click.echo("="*60)
    click.echo("\nDefault Credentials (CHANGE IN PRODUCTION!):")
    click.echo("   admin    -> admin@shop.local    / Password123")
    click.echo("   manager  -> manager@shop.local  / Password123")
    click.echo("   customer -> customer@shop.local / Password123")
    click.echo("")


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

    click.echo("PASS Database reset complete. Run 'python -m flask system init' to initialize.")


# =============================================================================
# USER MANAGEMENT COMMANDS
# =============================================================================

@click.group('users')
def users_group():
    """User inspection and bootstrap commands."""


@users_group.command('list')
@with_appcontext
def list_users():
    """List all users with their roles."""
    users = db.session.query(User).order_by(User.id.asc()).all()

    if not users:
        click.echo("No users found.")
        return

    click.echo("\n" + "="*80)
    click.echo(f"{'ID':<5} {'Username':<20} {'Email':<35} {'Role'}")
    click.echo("="*80)

    for user in users:
        click.echo(f"{user.id:<5} {user.username:<20} {user.email:<35} {user.role}")

    click.echo("="*80 + "\n")


@users_group.command('create')
@click.option('--username', prompt=True, help='Username')
@click.option('--email', prompt=True, help='Email address')
@click.option('--password', prompt=True, hide_input=True, confirmation_prompt=True, help='Password')
@click.option('--role', type=click.Choice(ROLES), default='customer', show_default=True, help='Role')
@with_appcontext
def create_user_cli(username, email, password, role):
    """
    Create a new user.

    Password must meet strength requirements:
    - Minimum 6 characters
    - At least one uppercase letter
    - At least one lowercase letter
    - At least one digit
    """
    try:
        user = create_user(username=username, email=email, password=password, role=role)
    except PasswordValidationError as e:
        click.echo(f"FAIL Password validation failed: {str(e)}")
        click.echo("Requirements: 6+ chars, uppercase, lowercase, digit")
        return
    except ValidationError as e:
        click.echo(f"FAIL Failed to create user: {str(e)}")
        return

    click.echo(f"PASS Created user: {user.username} ({user.email}) with role '{user.role}'")


@users_group.command('set-role')
@click.argument('user_id', type=int)
@click.argument('role', type=click.Choice(ROLES))
@with_appcontext
def set_role_cli(user_id, role):
    """Change a user's role."""
    try:
        user = set_role(user_id, role)
    except NotFoundError as e:
        click.echo(f"FAIL {str(e)}")
        return

    click.echo(f"PASS User '{user.username}' now has role '{user.role}'")


# =============================================================================
# CATALOG COMMANDS
# =============================================================================

@click.group('categories')
def categories_group():
    """Category inspection commands."""


def _echo_tree(nodes, depth=0):
    for node in nodes:
        click.echo(f"{'  ' * depth}- {node['name']} ({node['slug']}, id={node['id']})")
        _echo_tree(node["children"], depth + 1)


@categories_group.command('tree')
@click.option('--root', default=None, help='Slug or id of the subtree root')
@with_appcontext
def category_tree_cli(root):
    """Print the category tree."""
    try:
        tree = category_service.resolve_tree(root)
    except NotFoundError as e:
        click.echo(f"FAIL {str(e)}")
        return

    if not tree:
        click.echo("No categories found.")
        return

    _echo_tree(tree)


def register_commands(app):
    """Register all CLI commands with Flask app."""
    app.cli.add_command(system_group)
    app.cli.add_command(users_group)
    app.cli.add_command(categories_group)
