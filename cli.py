"""Admin CLI for RetroDesk."""

from __future__ import annotations

import asyncio
import os

import click


def run_async(coro):
    """Run an async function in a new event loop."""
    return asyncio.run(coro)


@click.group()
def cli():
    """RetroDesk administration CLI."""
    pass


# --- Setup ---


@cli.command()
def setup():
    """Run migrations and create the upload directory."""
    click.echo("Running database migrations...")
    _run_migrations()

    from portal.services.disk import ensure_upload_dir

    click.echo(f"Upload directory: {ensure_upload_dir()}")
    click.echo("Setup complete.")


def _run_migrations():
    """Run Alembic migrations using the Python API."""
    from alembic import command
    from alembic.config import Config

    # Look for alembic.ini in /app (Docker) or alongside this script (local)
    for candidate in ["/app/alembic.ini", os.path.join(os.path.dirname(__file__), "alembic.ini")]:
        if os.path.exists(candidate):
            alembic_cfg = Config(candidate)
            script_dir = os.path.join(os.path.dirname(candidate), "alembic")
            if os.path.isdir(script_dir):
                alembic_cfg.set_main_option("script_location", script_dir)
            command.upgrade(alembic_cfg, "head")
            return

    click.echo("  Warning: alembic.ini not found, skipping migrations.")


@cli.command()
@click.option("--host", default="0.0.0.0", show_default=True)
@click.option("--port", default=8000, show_default=True, type=int)
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host, port, reload):
    """Run the portal with uvicorn."""
    import uvicorn

    uvicorn.run("portal.main:app", host=host, port=port, reload=reload)


# --- User Management ---


@cli.group()
def user():
    """User management commands."""
    pass


@user.command("list")
def list_users():
    """List users with their file counts."""
    run_async(_list_users())


async def _list_users():
    from sqlalchemy import func, select

    from shared.database import dispose_engine, get_session_factory
    from shared.models import DesktopFile, User

    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(User, func.count(DesktopFile.id))
            .outerjoin(DesktopFile, DesktopFile.user_id == User.id)
            .group_by(User.id)
            .order_by(User.created_at)
        )
        rows = result.all()

    if not rows:
        click.echo("No users found.")
    for u, file_count in rows:
        click.echo(
            f"User {u.id} | {u.auth_provider} | {u.email or 'no email'} | Files: {file_count}"
        )

    await dispose_engine()


# --- Storage ---


@cli.group()
def storage():
    """Upload directory maintenance."""
    pass


@storage.command("orphans")
@click.option("--delete", is_flag=True, help="Remove orphaned files instead of listing them")
def orphans(delete):
    """Find files in the upload directory that no row points at."""
    run_async(_orphans(delete))


async def _orphans(delete: bool):
    from sqlalchemy import select

    from portal.services.disk import ensure_upload_dir
    from shared.database import dispose_engine, get_session_factory
    from shared.models import DesktopFile

    session_factory = get_session_factory()
    async with session_factory() as session:
        result = await session.execute(
            select(DesktopFile.file_path).where(DesktopFile.file_path.is_not(None))
        )
        referenced = {os.path.realpath(p) for p in result.scalars().all()}
    await dispose_engine()

    found = 0
    for path in sorted(ensure_upload_dir().iterdir()):
        if not path.is_file() or os.path.realpath(path) in referenced:
            continue
        found += 1
        if delete:
            path.unlink()
            click.echo(f"Deleted {path.name}")
        else:
            click.echo(path.name)

    click.echo(f"{found} orphaned file(s).")


if __name__ == "__main__":
    cli()
