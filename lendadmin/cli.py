import click
import httpx
from flask import current_app
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from .api_client import ApiError, get_api


@click.command("hash-password")
@click.argument("password")
def hash_password(password):
    """Print a hash to put in ADMIN_PASSWORD_HASH instead of a plain ADMIN_PASSWORD."""
    click.echo(generate_password_hash(password))


@click.command("ping-api")
@with_appcontext
def ping_api():
    """Fetch every collection from the lending API and report its size."""
    api = get_api()
    click.echo(f"Lending API: {current_app.config['LENDING_API_URL']}")
    failed = False
    for name in ("clients", "loans", "transactions"):
        try:
            rows = getattr(api, f"list_{name}")()
            click.echo(f"  {name}: {len(rows)}")
        except (ApiError, httpx.HTTPError) as e:
            failed = True
            click.echo(f"  {name}: error ({e})", err=True)
    if failed:
        raise SystemExit(1)


def register_cli(app):
    app.cli.add_command(hash_password)
    app.cli.add_command(ping_api)
