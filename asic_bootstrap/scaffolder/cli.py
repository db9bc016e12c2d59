"""Command-line entry point for project scaffolding.

Usage::

    asic-init
    asic-init --non-interactive --name blinker --freq 50
    python -m asic_bootstrap.scaffolder
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.panel import Panel

from ..config import Config
from ..prompts import ConsolePrompter, NonInteractivePrompter, Prompter
from ..utils import console, print_error, print_success, print_summary_table, print_warning
from .generator import MaterializeError, ProjectGenerator
from .request import (
    RequestValidationError,
    ScaffoldCancelled,
    ScaffoldRequest,
    collect_request,
    validate_request,
)


def print_next_steps(request: ScaffoldRequest) -> None:
    steps = [f"cd {request.project_root}"]
    if request.include_example:
        steps += [
            "make sim-waves              # Test example design",
            "make asic-flow-sky130       # Run complete ASIC flow",
            "make view-gds-sky130        # View final layout",
            "make compare-pdks           # Compare PDK results",
        ]
    else:
        steps += [
            "Add your RTL to sources/rtl/",
            "make update-list update-config",
            "make sim-waves              # Test your design",
            "make asic-flow-sky130       # Run ASIC flow",
        ]
    console.print("Next steps:")
    for number, step in enumerate(steps, start=1):
        console.print(f"  {number}. {step}")
    console.print()
    console.print("Documentation: README.md, docs/TAPEOUT_CHECKLIST.md, 'make help'")


def scaffold(request: ScaffoldRequest, config: Config, prompter: Prompter) -> int:
    """Confirm *request* with the operator and generate it.

    Returns a process exit code.
    """
    print_summary_table(
        {
            "Name": request.project_name,
            "Top module": request.top_module,
            "Clock": f"{request.clock_frequency_text} MHz ({request.clock_period_text} ns period)",
            "Example design": "yes" if request.include_example else "no",
            "Location": str(request.project_root),
        },
        title="Project configuration",
    )
    if not prompter.confirm("Proceed with project creation?", default=True):
        console.print("Project creation cancelled.")
        return 0

    try:
        ProjectGenerator(request, config=config).generate()
    except MaterializeError as exc:
        print_error(f"ERROR: {exc}")
        return 1

    print_success(f"Project created at {request.project_root}")
    print_next_steps(request)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Create a new ASIC project with multi-PDK OpenLane configuration",
    )
    parser.add_argument("--output-dir", default=None, help="Parent directory for the project")
    parser.add_argument("--name", default=None, help="Project name (letters, digits, _ and -)")
    parser.add_argument("--top", default=None, help="Top module name (default: derived from name)")
    parser.add_argument("--freq", default=None, help="Target clock frequency in MHz")
    parser.add_argument(
        "--example",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create the example counter design",
    )
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Never prompt; take every value from the command line and defaults",
    )
    parser.add_argument(
        "--on-invalid-frequency",
        choices=["fallback", "reject"],
        default=None,
        help="Use the default frequency or fail when --freq is invalid",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``asic-init``."""
    args = build_parser().parse_args(argv)

    config = Config.from_env()
    overrides: dict[str, object] = {}
    if args.output_dir:
        overrides["output_dir"] = Path(args.output_dir)
    if args.on_invalid_frequency:
        overrides["on_invalid_frequency"] = args.on_invalid_frequency
    if args.example is not None:
        overrides["include_example"] = args.example
    settings = config.scaffold.model_copy(update=overrides)
    config = config.model_copy(update={"scaffold": settings})

    prompter: Prompter = NonInteractivePrompter() if args.non_interactive else ConsolePrompter()

    console.print(
        Panel(
            "[bold bright_cyan]ASIC design project initialization[/bold bright_cyan]\n"
            "Multi-PDK OpenLane RTL-to-GDSII environment",
            title="[bold]asic-init[/bold]",
            border_style="bright_cyan",
        )
    )

    try:
        if args.non_interactive or args.name:
            request = validate_request(
                args.name or "",
                top_module=args.top,
                clock_frequency=args.freq,
                include_example=settings.include_example,
                output_dir=settings.output_dir,
                settings=settings,
            )
        else:
            request = collect_request(prompter, settings)
        code = scaffold(request, config, prompter)
    except RequestValidationError as exc:
        print_error(f"ERROR ({exc.field}): {exc}")
        sys.exit(1)
    except ScaffoldCancelled:
        print_warning("Exiting...")
        sys.exit(1)
    except KeyboardInterrupt:
        print_warning("\nInterrupted.")
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
