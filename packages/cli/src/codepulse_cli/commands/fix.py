"""fix command: generate a dependency-aware fix for a local file."""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console
from rich.text import Text

from codepulse_cli.auth import require_provider_key, resolve_github_token
from codepulse_core.errors import CodePulseError
from codepulse_core.fixes.pipeline import FixRequest
from codepulse_core.models import FixIssue

console = Console()

_LINE_STYLE = {"+ ": "green", "- ": "red"}


def print_fix(code_fix) -> None:
    check = code_fix.dependency_check
    for warning in check.warnings:
        console.print(f"[yellow]{warning}[/yellow]")
    for path in dict.fromkeys(check.dependencies):
        console.print(f"  [dim]{path}[/dim]")

    console.print("\n[bold]Changes[/bold]")
    for line in code_fix.changes.split("\n"):
        console.print(Text(line, style=_LINE_STYLE.get(line[:2], "")), highlight=False)

    console.print("\n[bold]Explanation[/bold]")
    console.print(Text(code_fix.explanation))


def _load_issues(path: str) -> list[FixIssue]:
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise click.BadParameter(f"not valid JSON: {e}", param_hint="--issues")
    if isinstance(data, dict):
        data = data.get("issues", [])
    if not isinstance(data, list):
        raise click.BadParameter("expected a JSON list of issues", param_hint="--issues")
    return [FixIssue.from_dict(item) for item in data if isinstance(item, dict)]


@click.command("fix")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--issues",
    "issues_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with a list of {description, suggestion, line} issues (a ReviewResult works too).",
)
@click.option("--path", "repo_path", default=None, help="Path of FILE inside the repository. Defaults to FILE.")
@click.option("--write", is_flag=True, help="Overwrite FILE with the fixed code.")
@click.pass_context
def fix_cmd(ctx, file: str, repo: str, issues_path: str, repo_path: str | None, write: bool):
    """Fix the given issues in FILE after checking who else uses its symbols.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub personal access token (or use gh CLI)
      ANTHROPIC_API_KEY    Required when model is anthropic (default)
    """
    from codepulse_server.services import build_services

    config = ctx.obj["config"]
    require_provider_key(config)

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    if repo.count("/") != 1:
        raise click.BadParameter("expected owner/name", param_hint="--repo")
    owner, name = repo.split("/")

    issues = _load_issues(issues_path)
    if not issues:
        console.print("[yellow]No issues to fix.[/yellow]")
        return

    source = Path(file)
    services = build_services(config)
    try:
        code_fix = services.pipeline.run(
            FixRequest(
                token=token,
                owner=owner,
                repo=name,
                file_path=repo_path or file,
                original_code=source.read_text(),
                issues=issues,
            )
        )
    except CodePulseError as e:
        raise click.ClickException(str(e))

    print_fix(code_fix)

    if write:
        source.write_text(code_fix.fixed_code)
        console.print(f"\n[green]Wrote fixed code to {file}[/green]")
