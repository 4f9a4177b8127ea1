"""Sync run orchestrator."""
import time
from typing import Any, Optional

from cdn_registry.domain.entities.app_config import AppConfig
from cdn_registry.domain.entities.run import SourceOutcome, Status, SyncReport
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.domain.services.pipeline_service import generate_built_at, generate_run_id
from cdn_registry.infra.build.runner import CommandRunner
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import get_logger, load_sources
from cdn_registry.infra.github.client import GitHubClient
from cdn_registry.infra.sources import AdapterContext
from cdn_registry.use_cases.steps.build_bundle_manifest import build_bundle_manifest
from cdn_registry.use_cases.steps.refresh_ui_assets import refresh_ui_assets
from cdn_registry.use_cases.steps.sync_source import sync_source, truncate

logger = get_logger(__name__)


def run_sync(
    app_config: AppConfig,
    sources: Optional[list[Any]] = None,
    catalog: Optional[PublicCatalog] = None,
    client: Optional[GitHubClient] = None,
    runner: Optional[CommandRunner] = None,
    strict: Optional[bool] = None,
    only: Optional[list[str]] = None,
    force: bool = False,
) -> SyncReport:
    """
    Run the publishing pipeline over every configured source.
    
    Args:
        app_config: Application configuration
        sources: Raw source entries (read from ``app_config.sources_path`` if None)
        catalog: Public catalog (defaults to one over ``app_config.public_dir``)
        client: Upstream host client (defaults to one built from ``app_config``)
        runner: Build command runner (defaults to subprocess)
        strict: Exit non-zero on any failure (defaults to ``app_config.strict``)
        only: Restrict the run to these package names
        force: Ignore recorded identities and republish every processed source
        
    Returns:
        Run report (also written to ``_index/sync-report.json``)
    """
    run_id = generate_run_id()
    built_at = generate_built_at()
    report = SyncReport(
        run_id=run_id,
        built_at=built_at,
        strict=app_config.strict if strict is None else strict,
    )
    
    logger.info("Starting sync: run=%s built_at=%s", run_id, built_at)
    sync_start = time.time()
    
    catalog = catalog or PublicCatalog.at(app_config.public_dir)
    context = AdapterContext(
        client=client or GitHubClient.from_config(app_config),
        work_dir=app_config.work_dir,
        runner=runner,
    )
    if sources is None:
        sources = load_sources(app_config.sources_path)
    
    state = catalog.load_state()
    
    for raw in sources:
        package = raw.get("package") if isinstance(raw, dict) else None
        if only and package not in only:
            continue
        if force and package:
            state.forget(package)
        report.sources.append(step_sync_source(raw, context, catalog, state, built_at))
    
    report.changed = state.changed or any(s.status == Status.OK for s in report.sources)
    if report.changed:
        step_finalize(app_config, catalog, state, built_at)
    else:
        logger.info("No upstream changes; outputs left untouched")
    
    catalog.write_report(report)
    
    sync_time = time.time() - sync_start
    logger.info(
        "Sync completed: %d sources, %d failed, changed=%s (total time: %.2f seconds)",
        len(report.sources), len(report.failed), report.changed, sync_time,
    )
    return report


def step_sync_source(
    raw: Any,
    context: AdapterContext,
    catalog: PublicCatalog,
    state: SyncState,
    built_at: str,
) -> SourceOutcome:
    """Step: Sync one source; any exception becomes a FAIL row."""
    package = str(raw.get("package") or "?") if isinstance(raw, dict) else "?"
    source_type = str(raw.get("type") or "?") if isinstance(raw, dict) else "?"
    try:
        outcome = sync_source(raw, context, catalog, state, built_at)
    except Exception as e:
        logger.exception("Source %s failed: %s", package, e)
        return SourceOutcome(
            package=package,
            type=source_type,
            action="sync",
            status=Status.FAIL,
            detail=truncate(f"{type(e).__name__}: {e}"),
        )
    logger.info("Source %s: %s %s", package, outcome.status.value, outcome.detail)
    return outcome


def step_finalize(app_config: AppConfig, catalog: PublicCatalog, state: SyncState, built_at: str) -> None:
    """Step: Refresh UI assets, persist state and rebuild the bundle manifest."""
    refresh_ui_assets(catalog, app_config.ui_dir, app_config.ui_files)
    catalog.save_state(state)
    build_bundle_manifest(catalog, app_config.cdn_base_url, built_at)
