"""nichescope - deliberate over trends and niches from the command line.

Exit codes: 0 complete, 1 deliberation failed, 12 invalid input,
13 provider could not be initialized.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_INVALID_INPUT = 12
EXIT_PROVIDER_INIT = 13

console = Console(stderr=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def _load_provider(ctx: click.Context):
    """Resolve config and build the provider, exiting with 13 on failure."""
    from ..core.config import get_effective_config, get_persona_dir
    from ..providers.base import get_ai_provider

    opts = ctx.obj
    cli_overrides: dict = {}
    if opts["ai_provider"]:
        cli_overrides.setdefault("ai", {})["provider"] = opts["ai_provider"]

    try:
        config = get_effective_config(opts["config_path"], cli_overrides or None)
        provider = get_ai_provider(
            config,
            provider_override="dry-run" if opts["dry_run"] else opts["ai_provider"],
            model_override=opts["ai_model"],
            endpoint_override=opts["ai_endpoint"],
        )
    except (ValueError, FileNotFoundError, yaml.YAMLError) as e:
        console.print(f"  [red]ERROR[/red] Failed to initialize AI provider: {e}")
        ctx.exit(EXIT_PROVIDER_INIT)

    console.print(f"  [green]OK[/green] Provider: {provider.name} ({provider.model})")
    return provider, get_persona_dir(config)


def _read_json_file(ctx: click.Context, path: Path) -> dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as e:
        console.print(f"  [red]ERROR[/red] Could not read {path}: {e}")
        ctx.exit(EXIT_INVALID_INPUT)
    if not isinstance(data, dict):
        console.print(f"  [red]ERROR[/red] {path} must contain a JSON object")
        ctx.exit(EXIT_INVALID_INPUT)
    return data


def _build_request(ctx: click.Context, model_cls, data: dict):
    try:
        return model_cls.model_validate(data)
    except ValidationError as e:
        console.print(f"  [red]ERROR[/red] Invalid input: {e.error_count()} problem(s)")
        for err in e.errors():
            loc = ".".join(str(p) for p in err["loc"])
            console.print(f"    {loc}: {err['msg']}")
        ctx.exit(EXIT_INVALID_INPUT)


def _emit(response: dict, markdown: str, output_format: str, output: Optional[str]) -> None:
    from ..core.report import export_response_json

    if output_format == "json":
        if output:
            export_response_json(response, Path(output))
            console.print(f"  Results: {output}")
        else:
            click.echo(json.dumps(response, ensure_ascii=False, indent=2))
        return

    if output:
        Path(output).write_text(markdown, encoding="utf-8")
        console.print(f"  Results: {output}")
    else:
        click.echo(markdown)


def _report_status(response: dict) -> int:
    if response.get("success"):
        console.print("  [green]Complete[/green]")
        return EXIT_OK
    console.print(
        f"  [red]FAILED[/red] {response.get('error')} ({response.get('errorCode')})"
    )
    return EXIT_FAILED


output_options = [
    click.option("--format", "-f", "output_format", type=click.Choice(["markdown", "json"]), default="markdown"),
    click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write results to a file"),
]


def with_output_options(func):
    for option in reversed(output_options):
        func = option(func)
    return func


@click.group()
@click.pass_context
@click.option("--config", "config_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Config file (default: ./nichescope.yaml)")
@click.option("--ai-provider", type=click.Choice(["openai", "azure-openai", "dry-run"]))
@click.option("--ai-model", type=str, help="Model override")
@click.option("--ai-endpoint", type=str, help="Endpoint override")
@click.option("--dry-run", is_flag=True, help="Use canned responses (no API calls)")
@click.option("--verbose", "-v", is_flag=True, help="Log progress and retries")
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    ai_provider: Optional[str],
    ai_model: Optional[str],
    ai_endpoint: Optional[str],
    dry_run: bool,
    verbose: bool,
) -> None:
    """nichescope - optimist vs skeptic deliberation over market niches."""
    _setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update(
        config_path=config_path,
        ai_provider=ai_provider,
        ai_model=ai_model,
        ai_endpoint=ai_endpoint,
        dry_run=dry_run,
    )


@cli.command()
@click.pass_context
@click.argument("title")
@click.option("--category", default="", help="Trend category")
@click.option("--why-trending", default="", help="Why the trend is growing")
@click.option("--main-pain", default=None, help="Preliminary main pain")
@click.option("--pain", "pains", multiple=True, help="Known pain point (repeatable)")
@with_output_options
def analyze(
    ctx: click.Context,
    title: str,
    category: str,
    why_trending: str,
    main_pain: Optional[str],
    pains: tuple[str, ...],
    output_format: str,
    output: Optional[str],
) -> None:
    """Deep analysis of a trend: optimist + skeptic, then arbiter."""
    from ..core.report import build_response, render_deliberation_markdown
    from ..core.workflows import run_deep_analysis
    from ..models.requests import DeepAnalysisRequest

    data: dict = {"trend_title": title, "trend_category": category, "why_trending": why_trending}
    if main_pain or pains:
        data["existing_analysis"] = {"main_pain": main_pain, "key_pain_points": list(pains)}
    request = _build_request(ctx, DeepAnalysisRequest, data)

    provider, persona_dir = _load_provider(ctx)
    console.print(f"\n  [cyan]Deliberating on {title}...[/cyan]")
    result = asyncio.run(run_deep_analysis(provider, request, persona_dir=persona_dir))

    response = build_response(result, analysis_type="deep_parallel_arbitration")
    _emit(response, render_deliberation_markdown(result), output_format, output)
    ctx.exit(_report_status(response))


@cli.command()
@click.pass_context
@click.argument("niche")
@click.option("--description", default="", help="Business or problem description")
@click.option("--audience", default=None, help="Target audience")
@click.option("--problems", default=None, help="Known problems")
@click.option("--sources", "sources_path", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="JSON file with collected Reddit/YouTube/Google Trends data")
@with_output_options
def niche(
    ctx: click.Context,
    niche: str,
    description: str,
    audience: Optional[str],
    problems: Optional[str],
    sources_path: Optional[Path],
    output_format: str,
    output: Optional[str],
) -> None:
    """Deep analysis of a niche grounded in collected source data."""
    from ..core.report import build_response, render_deliberation_markdown
    from ..core.workflows import run_niche_deep_analysis
    from ..models.requests import NicheAnalysisRequest

    data: dict = {
        "niche": niche,
        "description": description,
        "target_audience": audience,
        "existing_problems": problems,
    }
    if sources_path:
        data["sources"] = _read_json_file(ctx, sources_path)
    request = _build_request(ctx, NicheAnalysisRequest, data)

    provider, persona_dir = _load_provider(ctx)
    console.print(f"\n  [cyan]Deliberating on niche {niche}...[/cyan]")
    result = asyncio.run(run_niche_deep_analysis(provider, request, persona_dir=persona_dir))

    response = build_response(
        result, analysis_type="niche_deep_parallel_arbitration", extra={"niche": niche}
    )
    _emit(response, render_deliberation_markdown(result, title="Niche Analysis"), output_format, output)
    ctx.exit(_report_status(response))


@cli.command()
@click.pass_context
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@with_output_options
def spec(
    ctx: click.Context,
    input_file: Path,
    output_format: str,
    output: Optional[str],
) -> None:
    """Generate a product specification from a trend + pain analysis JSON file."""
    from ..core.report import build_product_spec_response, render_product_spec_markdown
    from ..core.workflows import run_product_spec
    from ..models.requests import ProductSpecRequest

    request = _build_request(ctx, ProductSpecRequest, _read_json_file(ctx, input_file))

    provider, persona_dir = _load_provider(ctx)
    console.print(f"\n  [cyan]Writing product spec for {request.trend.title}...[/cyan]")
    result = asyncio.run(run_product_spec(provider, request, persona_dir=persona_dir))

    response = build_product_spec_response(result)
    _emit(response, render_product_spec_markdown(result), output_format, output)
    ctx.exit(_report_status(response))


@cli.command()
def personas() -> None:
    """List the available personas."""
    from ..core.personas import PERSONA_DEFS

    table = Table(title="Personas")
    table.add_column("Key", no_wrap=True)
    table.add_column("Name")
    table.add_column("Stance")
    for key, persona in PERSONA_DEFS.items():
        color = persona.get("color", "white")
        table.add_row(key, f"[{color}]{persona['name']}[/{color}]", persona["stance"])
    Console().print(table)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
