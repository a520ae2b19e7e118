# commands.py: `flask <command>` helpers for operators
import click
from flask.cli import with_appcontext

from extensions import db
from models.user import ROLE_ADMIN, User
from security.middleware import get_sessions


@click.command("init-db")
@with_appcontext
def init_db_command():
    """Create database tables."""
    db.create_all()
    click.echo("Database tables created.")


@click.command("create-admin")
@click.argument("username")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
@click.option("--full-name", default="", help="Display name for a new account.")
@with_appcontext
def create_admin_command(username, password, full_name):
    """Create an admin account, or promote and re-key an existing one."""
    user = User.find_by_username(username)
    if user is None:
        user = User(username=User.normalize_username(username), full_name=full_name)
        db.session.add(user)
    elif full_name:
        user.full_name = full_name
    user.role = ROLE_ADMIN
    user.set_password(password)
    db.session.commit()
    click.echo(f"Admin ready: {user.username} (id={user.id})")


@click.command("reset-password")
@click.argument("username")
@click.argument("password")
@with_appcontext
def reset_password_command(username, password):
    """Set a new password for USERNAME."""
    user = User.find_by_username(username)
    if not user:
        raise click.ClickException(f"User not found: {username}")
    user.set_password(password)
    db.session.commit()
    click.echo(f"Password reset for: {user.username}")


@click.command("purge-sessions")
@with_appcontext
def purge_sessions_command():
    """Drop expired server-side sessions (memory backend only)."""
    sessions = get_sessions()
    if not hasattr(sessions, "purge_expired"):
        click.echo("Signed sessions are not stored; nothing to purge.")
        return
    click.echo(f"Purged {sessions.purge_expired()} expired session(s).")


def register_commands(app):
    app.cli.add_command(init_db_command)
    app.cli.add_command(create_admin_command)
    app.cli.add_command(reset_password_command)
    app.cli.add_command(purge_sessions_command)
