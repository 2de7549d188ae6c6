"""CLI commands for Wildtrip."""

import asyncio
import base64
import re
import secrets
import sys
from pathlib import Path

import click


@click.group()
@click.version_option(package_name="wildtrip")
def cli():
    """Wildtrip - content backend for species, protected areas and news."""
    pass


@cli.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to")
@click.option("--port", default=8080, type=int, help="Port to bind to")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, type=int, help="Number of worker processes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Logging level",
)
def serve(host, port, reload, workers, log_level):
    """Run the API server."""
    import signal

    from hypercorn.asyncio import serve as hypercorn_serve
    from hypercorn.config import Config

    config = Config()
    config.application_path = "wildtrip.asgi:create_app()"
    config.bind = [f"{host}:{port}"]
    config.workers = 1 if reload else workers
    config.loglevel = log_level.upper()
    config.include_server_header = False

    if reload:
        config.use_reloader = True
        from hypercorn.run import run
        run(config)
        return

    from wildtrip.asgi import create_app

    app = create_app()
    shutdown_event = asyncio.Event()

    loop = asyncio.new_event_loop()
    loop.add_signal_handler(signal.SIGINT, shutdown_event.set)
    loop.add_signal_handler(signal.SIGTERM, shutdown_event.set)
    try:
        loop.run_until_complete(
            hypercorn_serve(app, config, shutdown_trigger=shutdown_event.wait)
        )
    finally:
        loop.close()


@cli.command()
@click.option(
    "--write",
    type=click.Path(),
    default=None,
    help="Write SECRET_KEY to a .env file",
)
@click.option(
    "--format",
    "fmt",
    default="urlsafe",
    type=click.Choice(["urlsafe", "hex", "base64"]),
    help="Output format for the secret key",
)
@click.option("--length", default=32, type=int, help="Number of random bytes")
def secret(write, fmt, length):
    """Generate a secure secret key."""
    if fmt == "urlsafe":
        key = secrets.token_urlsafe(length)
    elif fmt == "hex":
        key = secrets.token_hex(length)
    else:
        key = base64.b64encode(secrets.token_bytes(length)).decode("ascii")

    if not write:
        click.echo(key)
        return

    env_path = Path(write)
    env_content = env_path.read_text() if env_path.exists() else ""

    secret_key_pattern = re.compile(r"^SECRET_KEY=.*$", re.MULTILINE)
    new_line = f"SECRET_KEY={key}"

    if secret_key_pattern.search(env_content):
        env_content = secret_key_pattern.sub(new_line, env_content)
    else:
        if env_content and not env_content.endswith("\n"):
            env_content += "\n"
        env_content += new_line + "\n"

    env_path.write_text(env_content)
    click.echo(f"SECRET_KEY written to {env_path}")


def _run_alembic(args: list[str]) -> None:
    """Build an Alembic Config programmatically and run the given command."""
    from alembic.config import CommandLine, Config

    package_dir = Path(__file__).parent
    alembic_ini = package_dir / "alembic.ini"
    if not alembic_ini.exists():
        click.echo("Error: Could not find alembic.ini", err=True)
        sys.exit(1)

    cfg = Config(str(alembic_ini))

    cmd = CommandLine()
    options = cmd.parser.parse_args(args)
    if not hasattr(options, "cmd"):
        cmd.parser.error("too few arguments")
    else:
        cfg.cmd_opts = options
        fn, positional, kwarg = options.cmd
        fn(
            cfg,
            *[getattr(options, k, None) for k in positional],
            **{k: getattr(options, k, None) for k in kwarg},
        )


@cli.command(
    context_settings=dict(
        ignore_unknown_options=True,
        allow_extra_args=True,
    )
)
@click.pass_context
def db(ctx):
    """Run database migrations via Alembic.

    \b
    Examples:
        wildtrip db upgrade head    # Apply all migrations
        wildtrip db downgrade -1    # Rollback one migration
        wildtrip db current         # Show current revision
        wildtrip db history         # Show migration history
    """
    if not ctx.args:
        click.echo(ctx.get_help())
        return

    _run_alembic(ctx.args)


@cli.command()
@click.argument("kind")
@click.argument("record_id", type=int)
def unlock(kind, record_id):
    """Force-release the edit lock on a record.

    KIND is a content kind name or path (species, protected-areas, news).
    """
    from wildtrip.app_config import build_db_config
    from wildtrip.config import get_settings
    from wildtrip.db.content_kinds import CONTENT_KINDS, get_content_kind_by_path
    from wildtrip.db.services import lock_service
    from wildtrip.lib.exceptions import ContentError

    try:
        content_kind = CONTENT_KINDS.get(kind) or get_content_kind_by_path(kind)
    except ContentError as exc:
        raise click.BadParameter(exc.detail, param_hint="KIND") from None

    db_config = build_db_config(get_settings())

    async def _unlock() -> tuple[bool, int | None]:
        try:
            async with db_config.get_session() as db_session:
                lock = await lock_service.get_lock(db_session, content_kind, record_id)
                holder = lock.locked_by if lock is not None else None
                # No user has ID 0, so this always goes through the override path
                released = await lock_service.release_lock(
                    db_session, content_kind, record_id, 0, override=True
                )
                return released, holder
        finally:
            await db_config.get_engine().dispose()

    try:
        released, holder = asyncio.run(_unlock())
    except ContentError as exc:
        click.echo(f"Error: {exc.detail}", err=True)
        sys.exit(1)

    if released and holder:
        click.echo(f"Released lock on {content_kind.name} {record_id} held by user {holder}")
    elif released:
        click.echo(f"Released expired lock on {content_kind.name} {record_id}")
    else:
        click.echo(f"{content_kind.label} {record_id} was not locked")


if __name__ == "__main__":
    cli()
