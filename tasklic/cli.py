"""
Command-line interface for tasklic.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Any

import click

from tasklic.common.config import Config
from tasklic.server import start_server
from tasklic.server.license_manager import LicenseManager

db_option = click.option(
    "--db-path",
    default=None,
    help="License database file (default: from TASKLIC_DB_PATH env)",
)
url_option = click.option(
    "--license-manager-url",
    default=None,
    help="License authority URL (default: from LICENSE_MANAGER_URL env)",
)


def _manager(db_path: str | None, license_manager_url: str | None) -> LicenseManager:
    return LicenseManager(license_manager_url, db_path=db_path)


def _echo(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
def cli() -> None:
    """tasklic license engine CLI"""


@cli.command()
@click.argument("client_id")
@click.argument("base_url")
@click.option("--app-id", default=None, help="Application ID (default: TASKLIC_APP_ID)")
@db_option
@url_option
def acquire(
    client_id: str,
    base_url: str,
    app_id: str | None,
    db_path: str | None,
    license_manager_url: str | None,
) -> None:
    """Acquire and store a license from the authority"""
    manager = _manager(db_path, license_manager_url)
    try:
        result = asyncio.run(manager.acquire_license(client_id, base_url, app_id))
    finally:
        manager.close()
    _echo(
        {
            "success": result.success,
            "message": result.message,
            "license": result.license.public_dict() if result.license else None,
        }
    )
    if not result.success:
        raise click.ClickException(result.message)


@cli.command()
@click.argument("client_id")
@click.argument("domain")
@db_option
@url_option
def validate(
    client_id: str,
    domain: str,
    db_path: str | None,
    license_manager_url: str | None,
) -> None:
    """Validate the stored license for a domain"""
    manager = _manager(db_path, license_manager_url)
    try:
        result = asyncio.run(manager.validate_license(client_id, domain))
    finally:
        manager.close()
    _echo({"valid": result.valid, "message": result.message})
    if not result.valid:
        raise SystemExit(1)


@cli.command()
@click.argument("client_id")
@db_option
def status(client_id: str, db_path: str | None) -> None:
    """Show license status for a client"""
    manager = _manager(db_path, None)
    try:
        result = asyncio.run(manager.get_license_status(client_id))
    finally:
        manager.close()
    _echo(result.model_dump(mode="json"))


@cli.command()
@click.argument("client_id")
@click.option("--users", type=int, default=None, help="Check this user count")
@db_option
def limits(client_id: str, users: int | None, db_path: str | None) -> None:
    """Show user limits, optionally checking a user count"""
    manager = _manager(db_path, None)
    try:
        if users is None:
            user_limits = asyncio.run(manager.get_user_limits(client_id))
            _echo({"limits": user_limits.model_dump() if user_limits else None})
            return
        check = asyncio.run(manager.check_user_limit(client_id, users))
    finally:
        manager.close()
    _echo(check.model_dump(mode="json"))
    if not check.allowed:
        raise SystemExit(1)


@cli.command()
@click.option(
    "--host",
    default=None,
    help="Host to bind server to (default: from TASKLIC_SERVER_HOST env or 127.0.0.1)",
)
@click.option(
    "--port",
    default=None,
    type=int,
    help="Port to bind server to (default: from TASKLIC_SERVER_PORT env or 8000)",
)
@db_option
def serve(host: str | None, port: int | None, db_path: str | None) -> None:
    """Start the license admin API"""
    # Set environment variables before building the config
    if host:
        os.environ["TASKLIC_SERVER_HOST"] = host
    if port:
        os.environ["TASKLIC_SERVER_PORT"] = str(port)
    if db_path:
        os.environ["TASKLIC_DB_PATH"] = db_path

    start_server(Config())


if __name__ == "__main__":
    cli()
