"""
sigprofile CLI - command line interface.
"""

import json
import sys
from pathlib import Path
from typing import Any

import click
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

LOOKUP_TABLES = ("gpu", "isp", "city", "language", "screen", "country")


def _read_bag(path: str) -> Any:
    """Raw JSON from a bag file; exits 1 when it cannot be parsed."""
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        click.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        sys.exit(1)
    except UnicodeDecodeError as e:
        click.echo(f"Error: {path} is not UTF-8 text: {e}", err=True)
        sys.exit(1)


def _engine(config: Any, verbose: bool = False, quiet: bool = False) -> Any:
    """Build an engine, exiting 1 on a reference data problem."""
    from .logger import ProgressLogger
    from .orchestrator import ProfileEngine

    logger = ProgressLogger("cli", verbose=verbose, quiet=quiet)
    try:
        return ProfileEngine(config, logger=logger)
    except FileNotFoundError as e:
        click.echo(f"Error: reference data not found: {e}", err=True)
        click.echo("Check SIGPROFILE_DATA_DIR or reinstall the package.", err=True)
        sys.exit(1)
    except ValueError as e:
        click.echo(f"Error: invalid reference data: {e}", err=True)
        sys.exit(1)


def _config(warn: bool = True) -> Any:
    from .orchestrator import EngineConfig

    warnings: list[str] = []
    config = EngineConfig.from_env(warnings)
    if warn:
        for w in warnings:
            click.echo(f"[Warning] {w}", err=True)
    return config


def _print_profile(profile: Any) -> None:
    click.echo(f"\nProfile ({profile.source}, {profile.overall_confidence}% overall confidence)")
    click.echo("-" * 60)
    for name, attr in profile.attributes():
        click.echo(f"{name:<30} {attr.value} [{attr.confidence}%]")

    click.echo("\nInsights:")
    for line in profile.insights:
        click.echo(f"  - {line}")


@click.group()
@click.version_option(version="0.1.0", prog_name="sigprofile")
def main() -> None:
    """sigprofile - Browser signals to a probabilistic visitor profile"""
    pass


@main.command()
@click.argument("bag_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--remote-url", default=None, help="Remote analyzer base URL (overrides env)")
@click.option("--no-remote", is_flag=True, default=False, help="Skip the remote analyzer")
@click.option("--timeout", type=float, default=None, help="Seconds per remote attempt")
@click.option("--max-insights", "-n", type=click.IntRange(min=1), default=None, help="Insight cap")
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the profile as JSON")
@click.option("--output", "-o", type=click.Path(dir_okay=False), default=None, help="Write JSON here")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every scorer")
def analyze(
    bag_file: str,
    remote_url: str | None,
    no_remote: bool,
    timeout: float | None,
    max_insights: int | None,
    as_json: bool,
    output: str | None,
    verbose: bool,
) -> None:
    """Profile the signal bag in BAG_FILE."""
    config = _config()
    if remote_url:
        config.remote_url = remote_url
    if no_remote:
        config.use_remote = False
    if timeout is not None:
        config.remote_timeout = timeout
    if max_insights is not None:
        config.max_insights = max_insights

    raw = _read_bag(bag_file)
    # Progress lines would corrupt JSON on stdout
    engine = _engine(config, verbose=verbose, quiet=as_json)
    profile = engine.profile(raw)
    data = profile.model_dump(mode="json")

    if output:
        out = Path(output)
        out.parent.mkdir(parents=True, exist_ok=True)
        with open(out, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        if not as_json:
            click.echo(f"\n[sigprofile] Wrote {out}")

    if as_json:
        click.echo(json.dumps(data, indent=2))
    else:
        _print_profile(profile)


@main.command()
@click.argument("bag_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("attribute")
def explain(bag_file: str, attribute: str) -> None:
    """Show the evidence behind one ATTRIBUTE (e.g. age, lifestyle_habits.smokes)."""
    config = _config(warn=False)
    config.use_remote = False
    engine = _engine(config, quiet=True)
    profile = engine.local(_read_bag(bag_file))

    try:
        attr = profile.attribute(attribute)
    except KeyError:
        names = ", ".join(name for name, _ in profile.attributes())
        click.echo(f"Unknown attribute: {attribute}", err=True)
        click.echo(f"Choose one of: {names}", err=True)
        sys.exit(1)

    click.echo(f"\n{attribute}: {attr.value}")
    click.echo(f"Bucket:      {attr.bucket}")
    click.echo(f"Confidence:  {attr.confidence}% ({attr.data_points} data points)")

    if attr.evidence:
        click.echo("\nEvidence:")
        for ev in attr.evidence:
            click.echo(f"  {ev.delta:+7.1f}  {ev.reason}")
    elif attr.reasoning:
        click.echo("\nReasoning:")
        for line in attr.reasoning:
            click.echo(f"  - {line}")

    for key, value in attr.details.items():
        click.echo(f"  {key}: {value}")


@main.command()
@click.argument("table", type=click.Choice(LOOKUP_TABLES))
@click.argument("key")
def lookup(table: str, key: str) -> None:
    """Look KEY up in a reference TABLE (screen keys look like 1920x1080)."""
    reference = _engine(_config(warn=False), quiet=True).context.reference

    if table == "gpu":
        hit = reference.gpu(key)
    elif table == "isp":
        hit = reference.isp_tier(key)
    elif table == "city":
        hit = reference.city(key)
    elif table == "language":
        hit = reference.language(key)
    elif table == "country":
        hit = reference.country(key)
    else:
        try:
            width, height = (int(p) for p in key.lower().split("x"))
        except ValueError:
            click.echo(f"Screen key must look like 1920x1080, got {key!r}", err=True)
            sys.exit(1)
        hit = reference.screen(width, height)

    click.echo(f"\n{table}: {key} -> {hit.describe()}")
    entry = hit.entry
    if hasattr(entry, "model_dump"):
        for field, value in entry.model_dump().items():
            click.echo(f"  {field}: {value}")
    else:
        click.echo(f"  value: {entry}")


@main.command()
def tables() -> None:
    """Show row counts for the loaded reference tables."""
    engine = _engine(_config(warn=False), quiet=True)
    click.echo("\nReference tables")
    click.echo("-" * 30)
    for name, count in engine.context.reference.summary().items():
        click.echo(f"{name:<16} {count:>6}")


@main.command()
def check() -> None:
    """Check configuration and reference data."""
    from .orchestrator import EngineConfig

    click.echo("Checking configuration...\n")

    warnings: list[str] = []
    config = EngineConfig.from_env(warnings)

    click.echo("Remote analyzer:")
    if config.remote_url:
        click.echo(f"  SIGPROFILE_REMOTE_URL:     {config.remote_url}")
    else:
        click.echo("  SIGPROFILE_REMOTE_URL:     NOT SET (local scoring only)")
    click.echo(f"  SIGPROFILE_REMOTE_TIMEOUT: {config.remote_timeout}s")

    click.echo("\nScoring:")
    click.echo(f"  SIGPROFILE_MAX_INSIGHTS:   {config.max_insights}")
    click.echo(f"  SIGPROFILE_REFERENCE_YEAR: {config.reference_year or 'NOT SET (bag clock only)'}")
    click.echo(f"  SIGPROFILE_CACHE_DIR:      {config.cache_dir or 'NOT SET (memory only)'}")
    click.echo(f"  SIGPROFILE_DATA_DIR:       {config.data_dir or 'packaged tables'}")

    for w in warnings:
        click.echo(f"\n[Warning] {w}", err=True)

    _engine(config, quiet=True)
    click.echo("\nReference tables loaded. Ready to run!")
    if warnings:
        sys.exit(1)


if __name__ == "__main__":
    main()
