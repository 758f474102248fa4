"""StormTask CLI — run the server and manage the database.

Usage:
    stormtask serve                              # Run the API with uvicorn
    stormtask init-db                            # Create missing tables
    stormtask create-user a@x.com Alice --admin  # Create an account (prompts for password)

create-user is the only way to get an administrator: registration over
HTTP always creates regular users.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from stormtask import __version__
from stormtask.config import settings

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


database_url_option = click.option(
    "--database-url",
    default=lambda: settings.database_url,
    show_default="STORMTASK_DATABASE_URL",
    help="SQLAlchemy async database URL",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="stormtask")
def main():
    """StormTask — task management backend."""


@main.command()
@click.option("--host", default=lambda: settings.host, help="Bind address")
@click.option("--port", default=lambda: settings.port, type=int, help="Bind port")
@click.option("--reload", is_flag=True, help="Reload on code changes (development)")
def serve(host: str, port: int, reload: bool):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("stormtask.main:app", host=host, port=port, reload=reload)


@main.command("init-db")
@database_url_option
def init_db(database_url: str):
    """Create the users, groups and tasks tables if they don't exist."""
    _run(_init_db_impl(database_url))
    click.secho("Schema ready", fg="green")


async def _init_db_impl(database_url: str) -> None:
    from stormtask.db.engine import build_engine, init_schema

    engine = build_engine(database_url)
    try:
        await init_schema(engine)
    finally:
        await engine.dispose()


@main.command("create-user")
@click.argument("email")
@click.argument("name")
@click.option("--admin", is_flag=True, help="Grant the administrator flag")
@click.password_option(help="Password (prompted if omitted)")
@database_url_option
def create_user(email: str, name: str, admin: bool, password: str, database_url: str):
    """Create a user account directly in the database."""
    user_id = _run(_create_user_impl(email, name, password, admin, database_url))
    if user_id is None:
        click.secho(f"Error: {email} is already registered", fg="red", err=True)
        sys.exit(1)
    role = "admin" if admin else "user"
    click.secho(f"Created {role} #{user_id} <{email}>", fg="green")


async def _create_user_impl(
    email: str, name: str, password: str, admin: bool, database_url: str
) -> Optional[int]:
    from stormtask.db.engine import build_engine, build_session_factory, init_schema
    from stormtask.services.errors import ConflictError
    from stormtask.services.user_service import UserService

    engine = build_engine(database_url)
    try:
        await init_schema(engine)
        async with build_session_factory(engine)() as session:
            svc = UserService(session, bcrypt_cost=settings.bcrypt_cost)
            try:
                user = await svc.create_user(email, name, password, is_admin=admin)
            except ConflictError:
                return None
            return user.id
    finally:
        await engine.dispose()


if __name__ == "__main__":
    main()
