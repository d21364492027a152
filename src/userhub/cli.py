#!/usr/bin/env python3
"""
Main CLI entry point for the userhub server.
"""

import asyncio
import os
import sys

import click
import uvicorn

from userhub import __version__
from userhub.config import settings
from userhub.logging import configure_logging, get_logger

logger = get_logger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="userhub")
def cli() -> None:
    """userhub CLI - manage the server and the user database."""
    pass


@cli.command()
@click.option(
    "--host",
    default=settings.api_host,
    help=f"Host to bind to (default: {settings.api_host})",
)
@click.option(
    "--port",
    default=settings.api_port,
    type=int,
    help=f"Port to bind to (default: {settings.api_port})",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
@click.option(
    "--workers",
    default=1,
    type=int,
    help="Number of worker processes (default: 1)",
)
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["debug", "info", "warning", "error"]),
    help="Log level (default: info)",
)
def serve(
    host: str,
    port: int,
    reload: bool,
    workers: int,
    log_level: str,
) -> None:
    """Start the userhub API server."""

    configure_logging(debug=(log_level == "debug"), level=log_level)

    logger.info(
        "Starting userhub API server",
        host=host,
        port=port,
        reload=reload,
        workers=workers,
        log_level=log_level,
    )

    # Worker and reload processes import the app fresh and read settings from the environment
    if log_level == "debug":
        os.environ["USERHUB_DEBUG"] = "true"
        os.environ["USERHUB_LOG_LEVEL"] = "debug"
    else:
        os.environ.setdefault("USERHUB_DEBUG", "false")
        os.environ.setdefault("USERHUB_LOG_LEVEL", log_level)

    try:
        if reload or workers > 1:
            uvicorn.run(
                "userhub.api.app:app",
                host=host,
                port=port,
                reload=reload,
                workers=(workers if not reload else 1),  # reload doesn't work with multiple workers
                log_level=log_level,
                access_log=True,
            )
        else:
            from userhub.api.app import app

            uvicorn.run(
                app,
                host=host,
                port=port,
                log_level=log_level,
                access_log=True,
            )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.error("Server startup failed", error=str(e))
        sys.exit(1)


@cli.command("init-db")
def init_db() -> None:
    """Create the users table if it does not exist."""
    from userhub.database.connection import (
        check_database_connection,
        close_database,
        create_tables,
        init_database,
    )

    configure_logging()

    async def do_init() -> bool:
        try:
            init_database()
            ok, error = await check_database_connection()
            if not ok:
                click.echo(f"✗ Cannot reach database: {error}", err=True)
                return False
            await create_tables()
            click.echo("✓ Database initialized")
            return True
        except Exception as e:
            logger.error("Failed to initialize database", error=str(e))
            click.echo(f"✗ Error initializing database: {e}", err=True)
            return False
        finally:
            await close_database()

    if not asyncio.run(do_init()):
        sys.exit(1)


@cli.command("create-admin")
@click.option("--username", required=True, help="Username for the admin account")
@click.option("--email", required=True, help="Email address for the admin account")
@click.option("--first-name", default="Admin", help="First name (default: Admin)")
@click.option("--last-name", default="User", help="Last name (default: User)")
@click.option("--age", type=int, default=None, help="Age (optional)")
@click.password_option(help="Password for the admin account")
def create_admin(
    username: str,
    email: str,
    first_name: str,
    last_name: str,
    age: int | None,
    password: str,
) -> None:
    """Create an ADMIN account. Registration only ever creates USER accounts."""
    from userhub.auth.factory import get_password_hasher
    from userhub.database.connection import close_database, create_tables, init_database
    from userhub.errors import UserHubError
    from userhub.repository import NewUser, Role, SQLUserRepository
    from userhub.validation import RegistrationFields, validate_fields

    configure_logging()

    async def do_create() -> bool:
        try:
            fields = validate_fields(
                RegistrationFields,
                username=username,
                email=email,
                password=password,
                first_name=first_name,
                last_name=last_name,
                age=age,
            )
            new_user = NewUser(
                username=fields.username,
                email=fields.email,
                password_hash=await get_password_hasher().hash(fields.password),
                first_name=fields.first_name,
                last_name=fields.last_name,
                age=fields.age,
                role=Role.ADMIN,
            )

            init_database()
            await create_tables()
            record = await SQLUserRepository().insert(new_user)

            logger.info("Admin account created", user_id=str(record.id))
            click.echo(f"✓ Admin created: {record.id}")
            click.echo(f"  Username: {record.username}")
            click.echo(f"  Email: {record.email}")
            return True
        except UserHubError as e:
            click.echo(f"✗ {e.message}", err=True)
            return False
        except Exception as e:
            logger.error("Failed to create admin", error=str(e))
            click.echo(f"✗ Error creating admin: {e}", err=True)
            return False
        finally:
            await close_database()

    if not asyncio.run(do_create()):
        sys.exit(1)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    cli()
