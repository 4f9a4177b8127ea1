"""Upstream source adapter interface."""
from abc import ABC, abstractmethod

from cdn_registry.domain.entities.artifact import Artifact, Candidate, Resolution
from cdn_registry.domain.entities.source_config import SourceConfig
from cdn_registry.domain.entities.state import SyncState


class SourceAdapter(ABC):
    """One strategy per upstream source kind."""
    
    id: str
    aliases: tuple[str, ...] = ()
    
    def __init__(self, context):
        """
        Args:
            context: Shared run collaborators (host client, build step)
        """
        self.context = context
    
    def validate(self, source: SourceConfig) -> None:
        """
        Check type-specific required fields.
        
        Raises:
            ConfigError: If the source is misconfigured for this adapter
        """
    
    @abstractmethod
    def resolve(self, source: SourceConfig, state: SyncState) -> Resolution:
        """
        Resolve channel targets against the prior state.
        
        Args:
            source: Source configuration
            state: Idempotency ledger (read only here)
            
        Returns:
            Resolution with changed candidates, unchanged targets and per-target errors
        """
        raise NotImplementedError
    
    @abstractmethod
    def materialize(self, source: SourceConfig, candidate: Candidate) -> list[Artifact]:
        """
        Fetch (and optionally build) the files of one candidate.
        
        Raises:
            UpstreamError, ArtifactMatchError, BuildError
        """
        raise NotImplementedError
