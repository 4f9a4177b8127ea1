"""Centralized error types."""


class RegistryError(Exception):
    """Base exception for registry errors."""
    pass


class ConfigError(RegistryError):
    """Configuration error (missing field, unknown source type)."""
    pass


class UpstreamError(RegistryError):
    """Upstream host could not resolve a release, tag or ref."""
    pass


class ArtifactMatchError(RegistryError):
    """No asset or file matched the configured patterns."""
    pass


class BuildError(RegistryError):
    """Install/run command failed or the working directory is missing."""
    pass


class StorageError(RegistryError):
    """Public directory read/write error."""
    pass


class PublishConflictError(RegistryError):
    """Version directory and alias pointer would share a name."""
    pass
