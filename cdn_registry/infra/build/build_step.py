"""Build-from-source-snapshot step."""
import re
import shutil
from pathlib import Path
from typing import Optional

from cdn_registry.domain.entities.artifact import Artifact
from cdn_registry.domain.entities.source_config import BuildConfig
from cdn_registry.infra.archive import extract_all, safe_output_name
from cdn_registry.infra.build.runner import CommandRunner, CommandResult
from cdn_registry.infra.common.errors import ArtifactMatchError, BuildError
from cdn_registry.infra.common.logger import get_logger

logger = get_logger(__name__)

_CLEAN_INSTALL_LOCKFILES = ("package-lock.json", "npm-shrinkwrap.json")
_SKIP_DIRS = {"node_modules", ".git"}


def resolve_install_command(workdir: Path, configured: Optional[str]) -> Optional[str]:
    """
    Choose the install command.
    
    An explicit command wins (empty string disables install). Otherwise a
    lockfile selects a clean install, a bare ``package.json`` a regular
    install, and anything else installs nothing.
    """
    if configured is not None:
        return configured.strip() or None
    if any((workdir / name).exists() for name in _CLEAN_INSTALL_LOCKFILES):
        return "npm ci"
    if (workdir / "package.json").exists():
        return "npm install"
    return None


def _tail(result: CommandResult, lines: int = 20) -> str:
    return "\n".join(result.output.strip().splitlines()[-lines:])


class BuildStep:
    """Extracts a snapshot archive, runs install/run commands and collects outputs."""
    
    def __init__(self, runner: CommandRunner, work_dir: str | Path):
        """
        Initialize build step.
        
        Args:
            runner: External command runner
            work_dir: Scratch root; each build gets its own subdirectory
        """
        self.runner = runner
        self.work_dir = Path(work_dir)
    
    def run(
        self,
        package: str,
        ref: str,
        archive: bytes,
        config: BuildConfig,
        fallback_regex: Optional[str] = None,
    ) -> list[Artifact]:
        """
        Build a repository snapshot and collect its outputs.
        
        Args:
            package: Package name (scratch dir naming)
            ref: Tag or sha being built (scratch dir naming)
            archive: Repository snapshot zip
            config: Build configuration
            fallback_regex: Output regex used when ``config.outputs`` is empty
            
        Returns:
            Collected artifacts
            
        Raises:
            BuildError: Missing workdir or non-zero exit
            ArtifactMatchError: Nothing matched the output patterns
        """
        scratch = self.work_dir / package / re.sub(r"[^A-Za-z0-9._-]", "_", ref) / "build"
        if scratch.exists():
            shutil.rmtree(scratch)
        scratch.mkdir(parents=True)
        
        root = extract_all(archive, scratch)
        workdir = (root / config.workdir).resolve()
        if (workdir != root.resolve() and root.resolve() not in workdir.parents) or not workdir.is_dir():
            raise BuildError(f"Build workdir {config.workdir!r} not found in snapshot of {ref}")
        
        install = resolve_install_command(workdir, config.install)
        for phase, command in (("install", install), ("run", config.run)):
            if not command:
                continue
            result = self.runner.run(command, cwd=workdir, env=config.env, timeout=config.timeout)
            if not result.ok:
                raise BuildError(
                    f"{phase} command {command!r} exited with {result.returncode}:\n{_tail(result)}"
                )
            logger.info("Build %s for %s@%s succeeded", phase, package, ref)
        
        return collect_outputs(workdir, config, fallback_regex)


def collect_outputs(workdir: Path, config: BuildConfig, fallback_regex: Optional[str] = None) -> list[Artifact]:
    """
    Collect build outputs by path pattern.
    
    Args:
        workdir: Build working directory
        config: Build configuration (``outputs`` rules)
        fallback_regex: Regex over relative paths, flattened, when no rules are configured
        
    Returns:
        Artifacts in collection order
    """
    collected: dict[str, Artifact] = {}
    
    def add(name: str, path: Path) -> None:
        name = safe_output_name(name)
        if name in collected:
            raise ArtifactMatchError(f"Build outputs collide on name {name!r}; use flatten: false")
        collected[name] = Artifact(name=name, content=path.read_bytes())
    
    if config.outputs:
        for rule in config.outputs:
            for path in sorted(workdir.glob(rule.pattern)):
                if path.is_file():
                    add(path.name if rule.flatten else path.relative_to(workdir).as_posix(), path)
    elif fallback_regex:
        regex = re.compile(fallback_regex)
        for path in sorted(workdir.rglob("*")):
            relative = path.relative_to(workdir)
            if _SKIP_DIRS.intersection(relative.parts) or not path.is_file():
                continue
            if regex.search(relative.as_posix()):
                add(path.name, path)
    
    if not collected:
        patterns = [rule.pattern for rule in config.outputs] or [fallback_regex]
        raise ArtifactMatchError(
            f"Build produced no files matching {patterns}; check build.outputs and build.workdir"
        )
    return list(collected.values())
