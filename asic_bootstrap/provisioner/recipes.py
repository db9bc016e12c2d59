"""Install recipe for the open-source ASIC toolchain.

Declares the ordered :class:`InstallStep` list that brings a Debian/Ubuntu
(or WSL2) host to a working OpenLane setup:

1. essential build tools
2. simulation tools (Icarus Verilog, GTKWave)
3. layout viewers (KLayout, Magic) -- optional
4. Docker
5. OpenLane repository
6. OpenLane container images
7. SkyWater 130nm PDK
8. GlobalFoundries 180nm PDK -- optional, asks first
9. OpenLane smoke test -- optional, asks first
10. standalone Yosys -- optional, asks first
11. ngspice -- optional, asks first
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import httpx

from ..config import Config
from ..pdks import PDK_CATALOGUE
from ..utils import CommandError, command_exists, download_file, run_checked, run_command, with_sudo
from .host import HostContext
from .steps import InstallStep, StepFailure

ESSENTIAL_PACKAGES: tuple[str, ...] = ("git", "curl", "make", "build-essential", "bc")
ESSENTIAL_BINARIES: tuple[str, ...] = ("git", "curl", "make", "gcc", "bc")
SIMULATION_PACKAGES: tuple[str, ...] = ("iverilog", "gtkwave")
LAYOUT_PACKAGES: tuple[str, ...] = ("klayout", "magic")

DOCKER_RESTART_HINT = (
    "Docker was installed but is not usable from this session yet. "
    "Exit all terminals, run 'wsl --shutdown' from Windows (or log out and back in), "
    "then re-run the installer; completed steps will be skipped."
)


class ToolchainRecipe:
    """Builds the install steps for one host.

    All predicates read the filesystem or probe binaries without changing
    anything, so they are safe to evaluate on every run.
    """

    def __init__(self, config: Config, host: HostContext) -> None:
        self.config = config
        self.host = host

    # -- Command helpers ---------------------------------------------------

    @property
    def _toolchain_env(self) -> dict[str, str]:
        return {"PDK_ROOT": str(self.host.pdk_root)}

    def _run(self, step_id: str, cmd: list[str], **kwargs) -> str:
        kwargs.setdefault("timeout", self.config.command_timeout)
        try:
            return run_checked(cmd, **kwargs)
        except CommandError as exc:
            raise StepFailure(step_id, str(exc)) from exc

    def _apt_install(self, step_id: str, packages: Sequence[str]) -> Callable[[], None]:
        def action() -> None:
            env = {"DEBIAN_FRONTEND": "noninteractive"}
            self._run(step_id, with_sudo(["apt-get", "update"]), env=env)
            self._run(step_id, with_sudo(["apt-get", "install", "-y", *packages]), env=env)

        return action

    def _make(self, step_id: str, *targets: str) -> Callable[[], None]:
        def action() -> None:
            self._run(
                step_id,
                ["make", *targets],
                cwd=self.host.openlane_dir,
                env=self._toolchain_env,
            )

        return action

    # -- Predicates --------------------------------------------------------

    @staticmethod
    def binaries_present(*names: str) -> Callable[[], bool]:
        return lambda: all(command_exists(name) for name in names)

    def docker_usable(self) -> bool:
        if not command_exists("docker"):
            return False
        returncode, _, _ = run_command(["docker", "info"], timeout=30)
        return returncode == 0

    def openlane_cloned(self) -> bool:
        return (self.host.openlane_dir / ".git").is_dir()

    def openlane_checkout_valid(self) -> bool:
        return (self.host.openlane_dir / "Makefile").is_file()

    def openlane_images_present(self) -> bool:
        if not command_exists("docker"):
            return False
        returncode, stdout, _ = run_command(
            ["docker", "images", "--format", "{{.Repository}}"], timeout=30
        )
        return returncode == 0 and "openlane" in stdout

    def pdk_installed(self, target: str) -> Callable[[], bool]:
        variant = PDK_CATALOGUE[target].variant
        return lambda: (self.host.pdk_root / variant).is_dir()

    @property
    def smoke_test_marker(self) -> Path:
        return self.host.state_dir / "openlane-test.ok"

    def smoke_test_passed(self) -> bool:
        return self.smoke_test_marker.is_file()

    # -- Actions -----------------------------------------------------------

    def install_docker(self) -> None:
        script = self.host.state_dir / "get-docker.sh"
        try:
            download_file(self.config.docker_install_url, script)
        except httpx.HTTPError as exc:
            raise StepFailure(
                "docker", f"could not download {self.config.docker_install_url}: {exc}"
            ) from exc
        self._run("docker", with_sudo(["sh", str(script)]))
        if self.host.user and not self.host.is_root:
            self._run("docker", with_sudo(["usermod", "-aG", "docker", self.host.user]))

    def clone_openlane(self) -> None:
        self.host.workspace_dir.mkdir(parents=True, exist_ok=True)
        self._run(
            "openlane-repo",
            [
                "git", "clone", "--depth", "1",
                self.config.openlane_repo_url, str(self.host.openlane_dir),
            ],
        )

    def install_pdk(self, target: str) -> Callable[[], None]:
        variant = PDK_CATALOGUE[target].variant
        step_id = f"pdk-{target}"
        if PDK_CATALOGUE[target].default:
            return self._make(step_id, "pdk")
        return self._make(step_id, "pdk", f"PDK={variant}")

    def run_smoke_test(self) -> None:
        self._make("openlane-smoke-test", "test")()
        self.smoke_test_marker.parent.mkdir(parents=True, exist_ok=True)
        self.smoke_test_marker.write_text("ok\n", encoding="utf-8")

    # -- Step list ---------------------------------------------------------

    def steps(self) -> list[InstallStep]:
        essentials = self.binaries_present(*ESSENTIAL_BINARIES)
        simulators = self.binaries_present("iverilog", "gtkwave")
        viewers = self.binaries_present("klayout", "magic")
        yosys = self.binaries_present("yosys")
        ngspice = self.binaries_present("ngspice")

        return [
            InstallStep(
                id="essential-tools",
                description="Essential build tools (git, curl, make, build-essential, bc)",
                check=essentials,
                action=self._apt_install("essential-tools", ESSENTIAL_PACKAGES),
                verify=essentials,
            ),
            InstallStep(
                id="simulation-tools",
                description="Simulation tools (Icarus Verilog, GTKWave)",
                check=simulators,
                action=self._apt_install("simulation-tools", SIMULATION_PACKAGES),
                verify=simulators,
                depends_on=("essential-tools",),
            ),
            InstallStep(
                id="layout-tools",
                description="Layout viewers (KLayout, Magic)",
                check=viewers,
                action=self._apt_install("layout-tools", LAYOUT_PACKAGES),
                verify=viewers,
                depends_on=("essential-tools",),
                required=False,
                hint="Layout viewing and editing targets will not work without these.",
            ),
            InstallStep(
                id="docker",
                description="Docker container runtime",
                check=self.docker_usable,
                action=self.install_docker,
                verify=self.docker_usable,
                depends_on=("essential-tools",),
                hint=DOCKER_RESTART_HINT,
            ),
            InstallStep(
                id="openlane-repo",
                description=f"OpenLane repository ({self.host.openlane_dir})",
                check=self.openlane_cloned,
                action=self.clone_openlane,
                verify=self.openlane_checkout_valid,
                depends_on=("essential-tools",),
            ),
            InstallStep(
                id="openlane-images",
                description="OpenLane Docker images (10-20 minutes)",
                check=self.openlane_images_present,
                action=self._make("openlane-images", "pull-openlane"),
                verify=self.openlane_images_present,
                depends_on=("docker", "openlane-repo"),
            ),
            InstallStep(
                id="pdk-sky130",
                description="SkyWater 130nm PDK (sky130A)",
                check=self.pdk_installed("sky130"),
                action=self.install_pdk("sky130"),
                verify=self.pdk_installed("sky130"),
                depends_on=("openlane-images",),
            ),
            InstallStep(
                id="pdk-gf180",
                description="GlobalFoundries 180nm MCU PDK (gf180mcuA, 10-15 minutes)",
                check=self.pdk_installed("gf180"),
                action=self.install_pdk("gf180"),
                verify=self.pdk_installed("gf180"),
                depends_on=("openlane-images",),
                required=False,
                prompt="Install GlobalFoundries 180nm PDK?",
                hint="Projects can still target sky130; re-run later to add gf180.",
            ),
            InstallStep(
                id="openlane-smoke-test",
                description="OpenLane smoke test (make test)",
                check=self.smoke_test_passed,
                action=self.run_smoke_test,
                verify=self.smoke_test_passed,
                depends_on=("pdk-sky130",),
                required=False,
                prompt="Run the OpenLane smoke test now?",
            ),
            InstallStep(
                id="yosys",
                description="Standalone Yosys synthesis",
                check=yosys,
                action=self._apt_install("yosys", ("yosys",)),
                verify=yosys,
                depends_on=("essential-tools",),
                required=False,
                prompt="Install standalone Yosys for synthesis experiments outside OpenLane?",
            ),
            InstallStep(
                id="ngspice",
                description="ngspice mixed-signal simulator",
                check=ngspice,
                action=self._apt_install("ngspice", ("ngspice",)),
                verify=ngspice,
                depends_on=("essential-tools",),
                required=False,
                prompt="Install ngspice for mixed-signal simulation?",
            ),
        ]


def build_toolchain_steps(config: Config, host: HostContext) -> list[InstallStep]:
    """Return the ordered install steps for *host*."""
    return ToolchainRecipe(config, host).steps()
