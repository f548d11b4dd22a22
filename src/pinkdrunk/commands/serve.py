"""Web server command."""

import os

import click

from .base import ensure_initialized


@click.command()
@click.option("--host", default="127.0.0.1", help="Host to bind to (default: 127.0.0.1)")
@click.option("--port", "-p", default=8000, type=int, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.pass_context
def serve(ctx: click.Context, host: str, port: int, reload: bool):
    """Start the JSON API server.

    Examples:

        # Start on default port (8000)
        pinkdrunk serve

        # Expose to network (all interfaces)
        pinkdrunk serve --host 0.0.0.0

        # Development mode with auto-reload
        pinkdrunk serve --reload
    """
    ensure_initialized(ctx)

    import uvicorn

    from ..web import create_app

    click.echo()
    click.echo(click.style("Starting pinkdrunk API server...", fg="green"))
    click.echo()
    click.echo(f"  Local:   http://{host}:{port}")
    if host == "0.0.0.0":
        import socket
        hostname = socket.gethostname()
        try:
            local_ip = socket.gethostbyname(hostname)
            click.echo(f"  Network: http://{local_ip}:{port}")
        except socket.gaierror:
            pass
    click.echo()
    click.echo("Press Ctrl+C to stop the server.")
    click.echo()

    if reload:
        # The reloaded factory reads the data directory from settings
        os.environ["PINKDRUNK_DATA_DIR"] = str(ctx.obj["db_path"].parent)
        uvicorn.run("pinkdrunk.web:create_app", host=host, port=port, reload=True, factory=True)
    else:
        uvicorn.run(create_app(ctx.obj["db_path"]), host=host, port=port)
