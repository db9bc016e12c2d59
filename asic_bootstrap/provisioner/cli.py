"""Command-line entry point for toolchain provisioning.

Usage::

    asic-install
    asic-install --yes --workspace ~/asic_workspace
    python -m asic_bootstrap.provisioner
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.panel import Panel

from ..config import Config
from ..pdks import PDK_CATALOGUE, default_pdk
from ..prompts import ConsolePrompter, NonInteractivePrompter, Prompter
from ..utils import (
    console,
    print_error,
    print_section_header,
    print_success,
    print_summary_table,
    print_warning,
)
from .engine import ProvisioningEngine, print_run_table, print_verification_table
from .host import EnvironmentCheckError, HostContext, preflight
from .recipes import build_toolchain_steps


def print_pdk_info(host: HostContext) -> list[str]:
    """Describe every PDK found under the host's PDK root.

    Returns the targets that are installed.
    """
    installed = [
        target for target, pdk in PDK_CATALOGUE.items()
        if (host.pdk_root / pdk.variant).is_dir()
    ]
    if not installed:
        print_error("No PDKs found!")
        return installed

    print_section_header("Installed PDKs")
    for target in installed:
        pdk = PDK_CATALOGUE[target]
        body = "\n".join(f"  - {note}" for note in pdk.notes)
        console.print(f"[bold]{pdk.display_name} ({pdk.variant})[/bold]\n{body}\n")
    default = default_pdk()
    console.print(f"Default PDK for new projects: [bold]{default.variant}[/bold]")
    console.print()
    return installed


def provision(config: Config, prompter: Prompter, log_path: Path | None = None) -> int:
    """Run the full provisioning flow and return a process exit code."""
    console.print(
        Panel(
            "[bold bright_cyan]ASIC toolchain installer[/bold bright_cyan]\n"
            "OpenLane + PDKs + simulation + layout\n"
            f"Workspace : {config.workspace_dir}",
            title="[bold]asic-install[/bold]",
            border_style="bright_cyan",
        )
    )

    host = HostContext.from_config(config)
    try:
        capabilities = preflight(config)
    except EnvironmentCheckError as exc:
        print_error(f"Preflight failed: {exc}")
        return 1
    host = host.model_copy(update={"capabilities": capabilities})

    print_summary_table(
        {
            "RAM": f"{capabilities.memory_gb}GB",
            "Free disk": f"{capabilities.disk_free_gb}GB",
            "WSL distro": capabilities.wsl_distro or "-",
            "Package manager": capabilities.package_manager or "-",
        },
        title="Host resources",
    )

    console.print(
        "This will install:\n"
        "  - OpenLane (ASIC RTL-to-GDSII flow) and Docker\n"
        "  - SkyWater 130nm PDK (default)\n"
        "  - Optional: GlobalFoundries 180nm PDK, Yosys, ngspice\n"
        "  - Icarus Verilog + GTKWave (simulation)\n"
        "  - KLayout + Magic (layout viewing)\n"
    )
    if not prompter.confirm("Proceed with installation?", default=False):
        console.print("Installation cancelled.")
        return 0

    config.ensure_directories()
    steps = build_toolchain_steps(config, host)
    engine = ProvisioningEngine(steps, prompter=prompter)

    print_section_header("Installing")
    try:
        run = engine.run_steps(interactive=prompter.interactive)
    finally:
        if engine.last_run is not None:
            engine.last_run.save(log_path or config.provision_log_path)

    print_run_table(run)

    print_section_header("Verifying installation")
    print_verification_table(steps, engine.verify_all())
    print_pdk_info(host)

    if not run.success:
        fatal = run.fatal_step
        print_error(f"Installation stopped at '{fatal.step_id}': {fatal.detail}")
        print_warning("Fix the problem and re-run; completed steps will be skipped.")
        return 1

    print_success("Installation complete!")
    console.print(
        f"OpenLane location: {config.openlane_dir}\n"
        "Next steps:\n"
        f"  1. Test OpenLane: cd {config.openlane_dir} && make test\n"
        "  2. Create your first project: asic-init"
    )
    return 0


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``asic-install``."""
    parser = argparse.ArgumentParser(
        description="Install OpenLane, PDKs, simulators and layout viewers",
    )
    parser.add_argument(
        "--workspace",
        default=None,
        help="Workspace directory (default: ~/asic_workspace or $ASIC_WORKSPACE_DIR)",
    )
    parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Non-interactive: accept every prompt, including optional extras",
    )
    parser.add_argument(
        "--log",
        default=None,
        help="Where to write the JSON run log (default: <workspace>/.asic-bootstrap/provision-log.json)",
    )
    args = parser.parse_args(argv)

    config = Config.from_env()
    if args.workspace:
        config = config.model_copy(update={"workspace_dir": Path(args.workspace).expanduser()})

    prompter: Prompter = NonInteractivePrompter(assume_yes=True) if args.yes else ConsolePrompter()

    try:
        code = provision(config, prompter, Path(args.log) if args.log else None)
    except KeyboardInterrupt:
        print_warning("\nInterrupted. Re-run to resume; completed steps will be skipped.")
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
