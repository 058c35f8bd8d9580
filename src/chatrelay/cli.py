import typer

from chatrelay import __version__
from chatrelay.config import ChatRelayConfig
from chatrelay.server import create_app, socketio

app = typer.Typer()


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"chatrelay {__version__}")
        raise typer.Exit()


@app.command()
def main(
    host: str | None = typer.Option(
        None, "--host", help="Bind address. Overrides CHATRELAY_HOST."
    ),
    port: int | None = typer.Option(
        None, "--port", "-p", help="Port to listen on. Overrides PORT."
    ),
    data_file: str | None = typer.Option(
        None,
        "--data-file",
        help="JSON snapshot for rooms and messages. Overrides CHATRELAY_DATA_FILE.",
    ),
    admin_password: str | None = typer.Option(
        None,
        "--admin-password",
        help="Shared admin secret. Overrides ADMIN_PASSWORD.",
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Overrides CHATRELAY_LOG_LEVEL."
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    """Start the chatrelay server."""
    overrides = {
        "server_host": host,
        "server_port": port,
        "data_file": data_file,
        "admin_password": admin_password,
        "log_level": log_level,
    }
    try:
        config = ChatRelayConfig(
            **{key: value for key, value in overrides.items() if value is not None}
        )
    except ValueError as e:
        typer.echo(f"✗ Invalid configuration: {e}", err=True)
        raise typer.Exit(code=1)

    flask_app = create_app(config=config)
    typer.echo(f"Server running on port {config.server_port}")
    try:
        socketio.run(
            flask_app,
            host=config.server_host,
            port=config.server_port,
            allow_unsafe_werkzeug=True,
        )
    finally:
        flask_app.extensions["store"].close()
