"""External command invocation for the build step."""
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pydantic import BaseModel

from cdn_registry.infra.common.errors import BuildError
from cdn_registry.infra.common.logger import get_logger

logger = get_logger(__name__)


class CommandResult(BaseModel):
    """Exit status and combined output of one command."""
    command: str
    returncode: int
    output: str = ""
    
    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandRunner(ABC):
    """Run a shell command with a working directory, environment and timeout."""
    
    @abstractmethod
    def run(
        self,
        command: str,
        cwd: Path,
        env: Optional[dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> CommandResult:
        """
        Run a command to completion.
        
        Args:
            command: Shell command line
            cwd: Working directory
            env: Environment overrides merged over the process environment
            timeout: Seconds before the command is killed
            
        Returns:
            Command result (non-zero exit is not raised here)
            
        Raises:
            BuildError: If the command cannot be started or times out
        """
        raise NotImplementedError


class SubprocessRunner(CommandRunner):
    """Command runner backed by :mod:`subprocess`."""
    
    def run(self, command, cwd, env=None, timeout=None):
        merged_env = {**os.environ, **(env or {})}
        logger.info("Running %r in %s (timeout=%ss)", command, cwd, timeout)
        try:
            completed = subprocess.run(
                command,
                shell=True,
                cwd=str(cwd),
                env=merged_env,
                timeout=timeout,
                capture_output=True,
                text=True,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise BuildError(f"Command timed out after {timeout}s: {command}") from e
        except OSError as e:
            raise BuildError(f"Command could not start: {command}: {e}") from e
        
        output = (completed.stdout or "") + (completed.stderr or "")
        return CommandResult(command=command, returncode=completed.returncode, output=output)
