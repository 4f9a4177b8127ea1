"""Pipeline service utilities."""
from cdn_registry.infra.common.clock import get_clock


def generate_run_id() -> str:
    """Generate a unique run ID."""
    return get_clock().generate_uuid()


def generate_built_at() -> str:
    """Generate the run-wide ``built_at`` timestamp."""
    return get_clock().now_iso()
