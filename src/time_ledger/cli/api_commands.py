"""CLI commands for API management.

This module provides commands for running the Time Ledger REST API,
issuing tokens for existing users, and checking the API configuration.
"""

import sys
from pathlib import Path
from typing import Optional

import click

from time_ledger.api.auth import create_token_for_user
from time_ledger.api.server import run_server
from time_ledger.cli.common import fail, get_config, get_storage


@click.group()
def api() -> None:
    """API server management commands."""
    pass


@api.command()
@click.option("--host", default=None, help="Host address (default: from config)")
@click.option("--port", type=int, default=None, help="Port number (default: from config)")
@click.option("--workers", type=int, default=None, help="Worker processes (default: from config)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--ssl-cert", type=click.Path(exists=True), help="Path to SSL certificate file")
@click.option("--ssl-key", type=click.Path(exists=True), help="Path to SSL key file")
@click.pass_context
def serve(
    ctx: click.Context,
    host: Optional[str],
    port: Optional[int],
    workers: Optional[int],
    reload: bool,
    ssl_cert: Optional[str],
    ssl_key: Optional[str],
) -> None:
    """Start the API server.

    Examples:
        time-ledger api serve
        time-ledger api serve --host 0.0.0.0 --port 8080
        time-ledger api serve --reload  # Development mode
        time-ledger api serve --ssl-cert cert.pem --ssl-key key.pem
    """
    config = get_config(ctx)
    config.ensure_api_secret_key()

    final_host = host or config.get("api.host", "localhost")
    final_port = port or config.get("api.port", 8000)
    final_workers = workers or config.get("api.workers", 1)

    ssl_cert_path = Path(ssl_cert) if ssl_cert and ssl_key else None
    ssl_key_path = Path(ssl_key) if ssl_cert and ssl_key else None

    protocol = "https" if ssl_cert_path else "http"
    click.echo("🚀 Starting Time Ledger API server...")
    click.echo(f"   URL: {protocol}://{final_host}:{final_port}")
    click.echo(f"   Docs: {protocol}://{final_host}:{final_port}/docs")
    click.echo(f"   Data: {config.data_dir}")
    if reload:
        click.echo("   Mode: Development (auto-reload enabled)")
    click.echo()

    try:
        run_server(
            config=config,
            host=final_host,
            port=final_port,
            reload=reload,
            workers=final_workers,
            ssl_certfile=ssl_cert_path,
            ssl_keyfile=ssl_key_path,
        )
    except KeyboardInterrupt:
        click.echo("\n\n👋 Shutting down API server...")
    except OSError as e:
        click.echo(click.style(f"❌ Error starting server: {e}", fg="red"), err=True)
        sys.exit(1)


@api.group()
def token() -> None:
    """Manage API authentication tokens."""
    pass


@token.command("create")
@click.option("--email", help="Email of the user to issue the token for")
@click.option("--user-id", type=int, help="ID of the user to issue the token for")
@click.pass_context
def create_token_cmd(ctx: click.Context, email: Optional[str], user_id: Optional[int]) -> None:
    """Create an access token for an existing user.

    Tokens carry the user's current token version, so 'logout' through
    the API revokes them like any other token.

    Examples:
        time-ledger api token create --email ada@example.com
        time-ledger api token create --user-id 1
    """
    if (email is None) == (user_id is None):
        fail("Pass exactly one of --email or --user-id")

    storage = get_storage(ctx)
    user = storage.get_user_by_email(email) if email else storage.get_user(user_id)  # type: ignore[arg-type]
    if user is None:
        fail("User not found")

    config = get_config(ctx)
    config.ensure_api_secret_key()
    token_data = create_token_for_user(config, user)
    hours = token_data["expires_in"] // 3600

    click.echo(f"✅ Token created for {user.email}")
    click.echo()
    click.echo(f"Token: {token_data['access_token']}")
    click.echo(f"Expires in: {hours} hours")
    click.echo()
    click.echo("Example curl command:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    click.echo(
        f'  curl -H "Authorization: Bearer {token_data["access_token"]}" '
        f"http://{host}:{port}/api/v1/project-timelogs"
    )


@api.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show API configuration status.

    Examples:
        time-ledger api status
    """
    config = get_config(ctx)

    click.echo("📊 Time Ledger API Status")
    click.echo("=" * 50)

    click.echo("\n🌐 Server Configuration:")
    host = config.get("api.host", "localhost")
    port = config.get("api.port", 8000)
    click.echo(f"  Host: {host}")
    click.echo(f"  Port: {port}")
    click.echo(f"  Workers: {config.get('api.workers', 1)}")
    click.echo(f"  Data directory: {config.data_dir}")

    click.echo("\n🔐 Authentication:")
    expiry = config.get("api.authentication.token_expiry_hours", 24)
    has_secret = bool(config.get("api.authentication.secret_key"))
    click.echo(f"  Token Expiry: {expiry} hours")
    click.echo(f"  Secret Key: {'Set' if has_secret else 'Not set'}")
    if not has_secret:
        click.echo(click.style("  ⚠️  Run 'time-ledger api serve' to generate", fg="yellow"))

    click.echo("\n🌍 CORS:")
    cors_enabled = config.get("api.cors.enabled", True)
    cors_icon = "✅" if cors_enabled else "❌"
    click.echo(f"  {cors_icon} Enabled: {cors_enabled}")
    if cors_enabled:
        origins = config.get("api.cors.origins", [])
        click.echo(f"  Allowed Origins: {len(origins)}")
        for origin in origins:
            click.echo(f"    - {origin}")

    click.echo("\n🚀 Quick Start:")
    click.echo("  1. Start server: time-ledger api serve")
    click.echo("  2. Register: POST /api/v1/register")
    click.echo(f"  3. Open docs: http://{host}:{port}/docs")
