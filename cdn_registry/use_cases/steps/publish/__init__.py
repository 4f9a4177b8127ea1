"""Publish module."""
from cdn_registry.use_cases.steps.publish.version_publisher import VersionPublisher, PublishResult
from cdn_registry.use_cases.steps.publish.manifest_builder import ManifestBuilder

__all__ = [
    "VersionPublisher",
    "PublishResult",
    "ManifestBuilder",
]
