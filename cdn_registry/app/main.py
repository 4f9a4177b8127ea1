"""CLI entry point."""
import json
from pathlib import Path
from typing import Optional

import typer

from cdn_registry.domain.services.pipeline_service import generate_built_at
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import (
    RegistryError,
    compute_sri_map,
    get_logger,
    load_app_config,
    setup_logging,
)
from cdn_registry.use_cases.run_sync import run_sync
from cdn_registry.use_cases.steps.build_bundle_manifest import build_bundle_manifest
from cdn_registry.use_cases.steps.report_table import format_report

setup_logging()
logger = get_logger(__name__)

app = typer.Typer(help="Publish upstream front-end releases into a static CDN layout.", no_args_is_help=True)


def _app_config(env: Optional[str], public_dir: Optional[Path] = None, sources: Optional[Path] = None):
    try:
        app_config = load_app_config(env)
    except RegistryError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2)
    
    updates = {}
    if public_dir is not None:
        updates["public_dir"] = str(public_dir)
    if sources is not None:
        updates["sources_path"] = str(sources)
    return app_config.model_copy(update=updates)


@app.command()
def sync(
    strict: Optional[bool] = typer.Option(None, "--strict/--no-strict", help="Exit 1 when any source failed"),
    sources: Optional[Path] = typer.Option(None, "--sources", help="Sources file (JSON or YAML)"),
    public_dir: Optional[Path] = typer.Option(None, "--public-dir", help="Published layout root"),
    only: Optional[list[str]] = typer.Option(None, "--only", help="Only sync these packages"),
    force: bool = typer.Option(False, "--force", help="Republish even when upstream is unchanged"),
    env: Optional[str] = typer.Option(None, "--env", help="Config environment (local, staging, production)"),
):
    """Sync every configured upstream source and publish what changed."""
    app_config = _app_config(env, public_dir, sources)
    try:
        report = run_sync(app_config, strict=strict, only=only or None, force=force)
    except RegistryError as e:
        typer.echo(f"Sync aborted: {e}", err=True)
        raise typer.Exit(code=1)
    
    typer.echo(format_report(report))
    raise typer.Exit(code=report.exit_code)


@app.command()
def bundle(
    public_dir: Optional[Path] = typer.Option(None, "--public-dir", help="Published layout root"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Absolute CDN base URL"),
    env: Optional[str] = typer.Option(None, "--env"),
):
    """Rebuild _index/bundle-manifest.json from the current indexes."""
    app_config = _app_config(env, public_dir)
    catalog = PublicCatalog.at(app_config.public_dir)
    result = build_bundle_manifest(
        catalog,
        base_url if base_url is not None else app_config.cdn_base_url,
        generate_built_at(),
    )
    typer.echo(f"Bundle manifest written: {len(result['packages'])} packages")


@app.command()
def verify(
    packages: Optional[list[str]] = typer.Argument(None, help="Packages to check (default: all indexed)"),
    public_dir: Optional[Path] = typer.Option(None, "--public-dir", help="Published layout root"),
    env: Optional[str] = typer.Option(None, "--env"),
):
    """Check every pointer's files against its manifest."""
    app_config = _app_config(env, public_dir)
    catalog = PublicCatalog.at(app_config.public_dir)
    names = packages or sorted(catalog.read_global_index().packages)
    
    problems = []
    for package in names:
        for pointer in catalog.list_pointers(package):
            problems.extend(catalog.verify_pointer(package, pointer))
    
    for problem in problems:
        typer.echo(problem)
    typer.echo(f"{len(names)} packages checked, {len(problems)} problems")
    raise typer.Exit(code=1 if problems else 0)


@app.command()
def sri(directory: Path = typer.Argument(..., exists=True, file_okay=False, help="Directory to scan")):
    """Print the integrity map of the files in a directory."""
    entries = {name: entry.model_dump() for name, entry in compute_sri_map(directory).items()}
    typer.echo(json.dumps(entries, indent=2))


if __name__ == "__main__":
    app()
