"""review command: run a single cached review on a diff."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from codepulse_cli.auth import require_provider_key
from codepulse_core.errors import CodePulseError

console = Console()

_SEVERITY_STYLE = {"critical": "red", "high": "yellow", "medium": "blue", "low": "dim"}


def print_review(result) -> None:
    """Render a ReviewResult as a summary line plus an issues table."""
    console.print()
    console.print(Text(result.summary, style="bold"))
    console.print()
    if not result.issues:
        console.print("[green]No issues found.[/green]")
    else:
        table = Table(title=f"{len(result.issues)} issue(s)", show_header=True)
        table.add_column("Severity", style="bold")
        table.add_column("Category")
        table.add_column("Location")
        table.add_column("Description")
        table.add_column("Suggestion")
        for issue in result.issues:
            style = _SEVERITY_STYLE.get(issue.severity, "white")
            location = issue.file or ""
            if issue.line is not None:
                location += f":{issue.line}"
            table.add_row(
                f"[{style}]{issue.severity.upper()}[/{style}]",
                Text(issue.category),
                Text(location),
                Text(issue.description),
                Text(issue.suggestion),
            )
        console.print(table)
    console.print(
        f"[dim]cost ${result.cost:.5f} · tokens {result.tokens_used.input_tokens} in / "
        f"{result.tokens_used.output_tokens} out · {result.duration_ms}ms"
        f"{' · cached' if result.cached else ''}[/dim]"
    )


@click.command("review")
@click.argument("diff_file", type=click.File("r", encoding="utf-8"))
@click.option("--language", default=None, help="Language or framework hint for the reviewer.")
@click.option("--context", "context_text", default=None, help="Extra context to include in the prompt.")
@click.option(
    "--model",
    type=click.Choice(["anthropic", "openai"]),
    default=None,
    help="AI model provider. Overrides config file.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the raw ReviewResult JSON.")
@click.pass_context
def review_cmd(ctx, diff_file, language: str | None, context_text: str | None, model: str | None, as_json: bool):
    """Review a unified diff read from DIFF_FILE (use - for stdin)."""
    from codepulse_server.services import build_services

    config = dict(ctx.obj["config"])
    if model:
        config["model"] = model
    require_provider_key(config)

    services = build_services(config)
    try:
        result = services.engine.review(diff_file.read(), language=language, context=context_text)
    except CodePulseError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        print_review(result)
