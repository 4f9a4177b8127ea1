"""Sync one configured source: resolve, materialize, publish, index."""
from typing import Any

from cdn_registry.domain.entities.artifact import Candidate
from cdn_registry.domain.entities.run import SourceOutcome, Status, TargetOutcome
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.domain.entities.state import SyncState
from cdn_registry.infra.catalog import PublicCatalog
from cdn_registry.infra.common import RegistryError, get_logger, parse_source
from cdn_registry.infra.sources import AdapterContext, get_adapter
from cdn_registry.use_cases.steps.publish import VersionPublisher
from cdn_registry.use_cases.steps.update_indexes import record_publish

logger = get_logger(__name__)

DETAIL_LIMIT = 300
_TARGET_RANK = {"latest": 0, "stable": 1, "beta": 2}


def truncate(message: str, limit: int = DETAIL_LIMIT) -> str:
    """One-line message capped for the report."""
    line = " ".join(str(message).split())
    return line if len(line) <= limit else line[: limit - 3] + "..."


def publish_candidate(
    source: SourceConfig,
    candidate: Candidate,
    artifacts,
    publisher: VersionPublisher,
    catalog: PublicCatalog,
    state: SyncState,
    built_at: str,
) -> TargetOutcome:
    """Publish a materialized candidate, index it and record its identity."""
    result = publisher.publish(
        package=source.package,
        version=candidate.version,
        channel=candidate.channel,
        artifacts=artifacts,
        upstream=candidate.upstream,
        meta=source.meta,
        pointer=candidate.pointer,
        built_at=built_at,
    )
    record_publish(catalog, source.package, result.manifest.version, candidate.channel, built_at, source.meta)
    state.record_identity(source.package, candidate.target, candidate.identity)
    
    pointers = [p.rsplit("/", 1)[-1] for p in result.pointers]
    return TargetOutcome(
        target=candidate.target,
        status=Status.OK,
        ref=candidate.ref,
        version=result.manifest.version,
        detail=f"published {result.manifest.version} -> {', '.join(pointers)}",
    )


def summarize_outcome(source_type: str, package: str, targets: list[TargetOutcome], action: str) -> SourceOutcome:
    """Aggregate channel target outcomes into one report row."""
    targets = sorted(targets, key=lambda t: _TARGET_RANK.get(t.target, len(_TARGET_RANK)))
    statuses = {t.status for t in targets}
    if Status.FAIL in statuses:
        status = Status.FAIL
    elif Status.OK in statuses:
        status = Status.OK
    else:
        status = Status.SKIP
    
    if len(targets) == 1:
        ref = targets[0].ref
        detail = targets[0].detail
    else:
        ref = " ".join(f"{t.target}={t.ref}" for t in targets if t.ref) or None
        detail = "; ".join(f"@{t.target}: {t.detail}" for t in targets)
    
    return SourceOutcome(
        package=package,
        type=source_type,
        ref=ref,
        action=action,
        status=status,
        detail=truncate(detail),
        targets=targets,
    )


def sync_source(
    raw: Any,
    context: AdapterContext,
    catalog: PublicCatalog,
    state: SyncState,
    built_at: str,
    publisher: VersionPublisher | None = None,
) -> SourceOutcome:
    """
    Process one source entry.
    
    Channel targets fail independently: an error while resolving or
    publishing one target is recorded on that target only.
    
    Args:
        raw: Unvalidated source entry
        context: Adapter collaborators
        catalog: Public catalog instance
        state: Idempotency ledger (updated on successful publishes)
        built_at: Run timestamp
        publisher: Version publisher (defaults to one over ``catalog``)
        
    Returns:
        Report row
        
    Raises:
        ConfigError: If the entry is invalid or its type unknown
    """
    publisher = publisher or VersionPublisher(catalog)
    source = parse_source(raw)
    adapter = get_adapter(source.type, context)
    adapter.validate(source)
    
    resolution = adapter.resolve(source, state)
    targets: list[TargetOutcome] = []
    
    for target, message in resolution.errors.items():
        logger.warning("%s @%s: resolution failed: %s", source.package, target, message)
        targets.append(TargetOutcome(target=target, status=Status.FAIL, detail=truncate(message)))
    
    for target, note in resolution.notes.items():
        targets.append(TargetOutcome(target=target, status=Status.SKIP, detail=note))
    
    for candidate in resolution.unchanged:
        logger.info("%s @%s: unchanged (%s)", source.package, candidate.target, candidate.ref)
        targets.append(TargetOutcome(
            target=candidate.target,
            status=Status.SKIP,
            ref=candidate.ref,
            version=f"v{candidate.version}",
            detail="unchanged upstream",
        ))
    
    for candidate in resolution.candidates:
        logger.info("%s @%s: %s changed upstream", source.package, candidate.target, candidate.ref)
        try:
            artifacts = adapter.materialize(source, candidate)
            targets.append(publish_candidate(source, candidate, artifacts, publisher, catalog, state, built_at))
        except RegistryError as e:
            logger.warning("%s @%s: %s", source.package, candidate.target, e)
            targets.append(TargetOutcome(
                target=candidate.target,
                status=Status.FAIL,
                ref=candidate.ref,
                detail=truncate(str(e)),
            ))
    
    action = "publish" if resolution.needs_work else "check"
    return summarize_outcome(source.type, source.package, targets, action)
