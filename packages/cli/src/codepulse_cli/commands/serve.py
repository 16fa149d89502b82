"""serve command: run the HTTP API under uvicorn."""

from __future__ import annotations

import click
import uvicorn
from rich.console import Console

from codepulse_cli.auth import require_provider_key

console = Console()


@click.command("serve")
@click.option("--host", default=None, help="Interface to bind. Overrides config file.")
@click.option("--port", type=int, default=None, help="Port to listen on. Overrides config file.")
@click.pass_context
def serve_cmd(ctx, host: str | None, port: int | None):
    """Serve the review, fix and cache-stats endpoints.

    \b
    Required environment variables:
      ANTHROPIC_API_KEY    Required when model is anthropic (default)
      OPENAI_API_KEY       Required when model is openai
    """
    from codepulse_server.app import create_app
    from codepulse_server.services import build_services

    config = ctx.obj["config"]
    require_provider_key(config)

    host = host or config["host"]
    port = port or config["port"]
    app = create_app(build_services(config))

    console.print("\n[bold cyan]CodePulse server[/bold cyan]")
    console.print(f"  Listening on  http://{host}:{port}")
    console.print(f"  Provider      {config['model']}")
    console.print(f"  Cache         {config['cache']} ({config['cache_ttl_hours']}h TTL)\n")
    uvicorn.run(app, host=host, port=port, log_level="info")
