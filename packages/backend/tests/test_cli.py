"""CLI tests — init-db and create-user against a throwaway SQLite file.

Learn: Click's CliRunner invokes commands in-process and captures their
output and exit code, so no subprocess is needed. Each test points the
commands at a fresh database file under tmp_path.
"""

import asyncio

import pytest
from click.testing import CliRunner

from stormtask.cli.main import main
from stormtask.db.engine import build_engine, build_session_factory
from stormtask.services.user_service import UserService


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"


def _lookup(db_url: str, email: str):
    async def _get():
        engine = build_engine(db_url)
        try:
            async with build_session_factory(engine)() as session:
                return await UserService(session).get_user_by_email(email)
        finally:
            await engine.dispose()

    return asyncio.run(_get())


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert result.exit_code == 0
    assert "stormtask" in result.output


def test_init_db(db_url):
    result = CliRunner().invoke(main, ["init-db", "--database-url", db_url])
    assert result.exit_code == 0, result.output
    assert "Schema ready" in result.output

    # Idempotent
    result = CliRunner().invoke(main, ["init-db", "--database-url", db_url])
    assert result.exit_code == 0


def test_create_user(db_url):
    result = CliRunner().invoke(
        main,
        ["create-user", "a@x.com", "Alice", "--password", "pw", "--database-url", db_url],
    )
    assert result.exit_code == 0, result.output
    assert "Created user #1 <a@x.com>" in result.output

    user = _lookup(db_url, "a@x.com")
    assert user.name == "Alice"
    assert user.is_admin is False


def test_create_admin(db_url):
    result = CliRunner().invoke(
        main,
        ["create-user", "root@x.com", "Root", "--admin", "--password", "pw",
         "--database-url", db_url],
    )
    assert result.exit_code == 0, result.output
    assert "Created admin" in result.output
    assert _lookup(db_url, "root@x.com").is_admin is True


def test_create_user_duplicate(db_url):
    args = ["create-user", "a@x.com", "Alice", "--password", "pw", "--database-url", db_url]
    assert CliRunner().invoke(main, args).exit_code == 0

    result = CliRunner().invoke(main, args)
    assert result.exit_code == 1
    assert "already registered" in result.output


def test_create_user_prompts_for_password(db_url):
    result = CliRunner().invoke(
        main,
        ["create-user", "p@x.com", "Prompted", "--database-url", db_url],
        input="secret\nsecret\n",
    )
    assert result.exit_code == 0, result.output
    assert _lookup(db_url, "p@x.com") is not None
