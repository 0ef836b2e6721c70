"""Release-build a plugin crate, resolve its library and deploy it to the host."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Optional

from fbcli.config import Settings, settings
from fbcli.errors import IoError, PluginNotFound
from fbcli.models.artifacts import BuildResult
from fbcli.services.artifacts import ArtifactResolver
from fbcli.services.deployer import PluginDeployer
from fbcli.services.process_runner import ProcessRunner, SubprocessRunner
from fbcli.utils.logging import get_logger

log = get_logger(__name__)

PLUGIN_PREFIX = "plugin_"
NOT_A_PLUGIN = "plugin_system"
MANIFEST = "Cargo.toml"


def read_manifest(path: Path) -> dict:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except OSError as exc:
        raise IoError(path, f"cannot read manifest: {exc.strerror or exc}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise PluginNotFound(f"{path}: invalid manifest: {exc}") from exc


def package_name(crate_dir: Path) -> str:
    manifest = crate_dir / MANIFEST
    name = read_manifest(manifest).get("package", {}).get("name")
    if not isinstance(name, str) or not name:
        raise PluginNotFound(f"{manifest}: missing [package] name field")
    return name


def find_workspace_root(crate_dir: Path) -> Optional[Path]:
    """Nearest ancestor whose manifest declares a ``[workspace]`` table."""
    for parent in crate_dir.resolve().parents:
        manifest = parent / MANIFEST
        if manifest.is_file() and "workspace" in read_manifest(manifest):
            return parent
    return None


class PluginBuilder:
    def __init__(
        self,
        runner: ProcessRunner | None = None,
        cfg: Settings | None = None,
        *,
        resolver: ArtifactResolver | None = None,
        deployer: PluginDeployer | None = None,
    ) -> None:
        self._cfg = cfg or settings
        self._runner = runner or SubprocessRunner(self._cfg)
        self._resolver = resolver or ArtifactResolver()
        self._deployer = deployer or PluginDeployer()

    # ── crate location ────────────────────────────────────────────────

    def locate(self, start_dir: Path, plugin: Optional[str] = None) -> tuple[Path, bool]:
        """Return the crate directory and whether *start_dir* is the host root.

        Inside a ``plugin_*`` crate the crate is *start_dir*; in the host
        repository root (it has ``crates/``) *plugin* names the crate.
        """
        start = start_dir.resolve()
        if start.name == NOT_A_PLUGIN:
            raise PluginNotFound(f"{start}: {NOT_A_PLUGIN} is not a buildable plugin crate")
        if (start / MANIFEST).is_file() and start.name.startswith(PLUGIN_PREFIX):
            return start, False

        crates = start / "crates"
        if crates.is_dir():
            if not plugin:
                raise PluginNotFound(f"{start}: a plugin name is required in the host repository root")
            crate = plugin if plugin.startswith(PLUGIN_PREFIX) else f"{PLUGIN_PREFIX}{plugin}"
            if crate == NOT_A_PLUGIN:
                raise PluginNotFound(f"{crates / crate}: {NOT_A_PLUGIN} is not a buildable plugin crate")
            crate_dir = crates / crate
            if not (crate_dir / MANIFEST).is_file():
                raise PluginNotFound(f"{crate_dir}: plugin crate {crate!r} not found")
            return crate_dir, True

        raise PluginNotFound(f"{start}: not a plugin crate directory or host repository root")

    def target_dir(self, crate_dir: Path, host_root: Optional[Path] = None) -> Path:
        if host_root is not None:
            return host_root / "target" / "release"
        workspace = find_workspace_root(crate_dir)
        return (workspace or crate_dir) / "target" / "release"

    def default_host_path(self, crate_dir: Path, host_root: Optional[Path] = None) -> Path:
        if host_root is not None:
            return host_root
        return crate_dir.parent / self._cfg.fbcli_host_name

    # ── build ─────────────────────────────────────────────────────────

    def compile(self, crate_dir: Path) -> None:
        log.info("build.start", crate=str(crate_dir))
        self._runner.run(
            [self._cfg.fbcli_build_executable, "build", "--release"],
            cwd=crate_dir,
            check=True,
            timeout=self._cfg.fbcli_build_timeout_seconds,
        )
        log.info("build.done", crate=str(crate_dir))

    def build(
        self,
        start_dir: Path | str,
        plugin: Optional[str] = None,
        *,
        host_path: Optional[Path] = None,
        no_copy: bool = False,
    ) -> BuildResult:
        """Build, resolve and (unless *no_copy*) deploy one plugin."""
        start = Path(start_dir).resolve()
        crate_dir, in_host_root = self.locate(start, plugin)
        host_root = start if in_host_root else None
        pkg = package_name(crate_dir)

        self.compile(crate_dir)
        target = self.target_dir(crate_dir, host_root)
        artifact = self._resolver.resolve(target, package_name=pkg)

        deployment = None
        if not no_copy:
            dest = host_path or self.default_host_path(crate_dir, host_root)
            deployment = self._deployer.deploy(artifact, dest)

        return BuildResult(
            crate_dir=crate_dir,
            package_name=pkg,
            target_dir=target,
            artifact=artifact,
            deployment=deployment,
        )
