"""
API key management commands, registered on the app by PlaygroundAPI:

    flask playground-keys create [--expires-in DAYS]
    flask playground-keys list
    flask playground-keys revoke TOKEN
    flask playground-keys purge-expired
"""
import click
from flask.cli import AppGroup
from .api_key import ApiKey
from .playground_init import DB

keys_cli = AppGroup("playground-keys", help="Manage the api playground keys.")


@keys_cli.command("create")
@click.option("--expires-in", "expires_in", type=float, default=None, help="Validity in days (default: API_KEY_EXPIRATION_DAYS).")
def create_key(expires_in):
    """Create a new api key and print its token."""
    api_key = ApiKey.create(expires_in_days=expires_in)
    DB.session.commit()
    click.echo(f"Token: {api_key.token}")
    click.echo(f"Expires at: {api_key.expires_at.isoformat(timespec='seconds')}")


@keys_cli.command("list")
def list_keys():
    """List the api keys."""
    api_keys = DB.session.query(ApiKey).order_by(ApiKey.id).all()
    if not api_keys:
        click.echo("No api keys")
        return
    for api_key in api_keys:
        status = "expired" if api_key.expired else "valid"
        last_used = api_key.last_used_at.isoformat(timespec="seconds") if api_key.last_used_at else "never"
        click.echo(f"{api_key.id}\t{api_key.token}\t{status}\texpires {api_key.expires_at.isoformat(timespec='seconds')}\tlast used {last_used}")


@keys_cli.command("revoke")
@click.argument("token")
def revoke_key(token):
    """Delete the api key with the given TOKEN."""
    api_key = ApiKey.find_by_token(token)
    if api_key is None:
        raise click.ClickException(f"Unknown api key {token}")
    DB.session.delete(api_key)
    DB.session.commit()
    click.echo(f"Revoked api key {api_key.id}")


@keys_cli.command("purge-expired")
def purge_expired_keys():
    """Delete the expired api keys."""
    count = ApiKey.purge_expired()
    DB.session.commit()
    click.echo(f"Deleted {count} expired api key(s)")
