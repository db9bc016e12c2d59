"""Scaffold request validation.

Every input is validated here, before the scaffolder touches the
filesystem.  Non-interactive callers get a typed rejection naming the
offending field; :func:`collect_request` re-prompts instead.
"""

from __future__ import annotations

import re
from decimal import ROUND_DOWN, Decimal
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from ..config import ScaffoldSettings
from ..prompts import Prompter
from ..utils import print_error, print_warning

PROJECT_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")
FREQUENCY_RE = re.compile(r"^[0-9]+(\.[0-9]+)?$")
VERILOG_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Modules the example design defines next to the top-level wrapper.
EXAMPLE_MODULES = frozenset({"counter"})

_TWO_PLACES = Decimal("0.01")
# Highest frequency whose period still truncates to a non-zero 0.01 ns.
MAX_FREQUENCY_MHZ = 100000


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class RequestValidationError(ValueError):
    """A scaffold input was rejected.  ``field`` names the offending input."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message)


class InvalidName(RequestValidationError):
    def __init__(self, message: str) -> None:
        super().__init__("project_name", message)


class DirectoryExists(RequestValidationError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__("project_name", f"Directory '{path}' already exists!")


class InvalidModuleName(RequestValidationError):
    def __init__(self, message: str) -> None:
        super().__init__("top_module", message)


class InvalidFrequency(RequestValidationError):
    def __init__(self, message: str) -> None:
        super().__init__("clock_frequency_mhz", message)


class ScaffoldCancelled(Exception):
    """The operator chose not to continue."""


# ---------------------------------------------------------------------------
# Request model
# ---------------------------------------------------------------------------


class ScaffoldRequest(BaseModel):
    """A validated, immutable description of the project to create."""

    model_config = ConfigDict(frozen=True)

    project_name: str
    top_module: str
    clock_frequency_mhz: float = Field(..., gt=0)
    include_example: bool = True
    output_dir: Path = Field(default=Path("."))

    @property
    def clock_period_ns(self) -> float:
        """``1000 / frequency``, truncated to two decimal places."""
        return float(self._period_decimal())

    @property
    def clock_period_text(self) -> str:
        """Clock period formatted for generated files, e.g. ``"10.00"``."""
        return f"{self._period_decimal():.2f}"

    @property
    def clock_frequency_text(self) -> str:
        """Frequency as the operator would write it: ``"100"``, ``"62.5"``."""
        return format_number(self.clock_frequency_mhz)

    @property
    def testbench_name(self) -> str:
        return f"{self.top_module}_tb"

    @property
    def project_root(self) -> Path:
        return self.output_dir / self.project_name

    def _period_decimal(self) -> Decimal:
        return clock_period(self.clock_frequency_mhz)


def clock_period(frequency_mhz: float) -> Decimal:
    """``1000 / frequency_mhz`` in ns, truncated to two decimal places."""
    period = Decimal(1000) / Decimal(str(frequency_mhz))
    return period.quantize(_TWO_PLACES, rounding=ROUND_DOWN)


def format_number(value: float) -> str:
    """Render *value* without a trailing ``.0`` for whole numbers."""
    return str(int(value)) if float(value).is_integer() else repr(float(value))


# ---------------------------------------------------------------------------
# Field validators
# ---------------------------------------------------------------------------


def validate_project_name(name: str, output_dir: Path) -> str:
    name = name or ""
    if not name.strip():
        raise InvalidName("Project name cannot be empty.")
    if not PROJECT_NAME_RE.match(name):
        raise InvalidName(
            f"Invalid project name '{name}'. Use only letters, numbers, underscore, and hyphen."
        )
    target = output_dir / name
    if target.exists():
        raise DirectoryExists(target)
    return name


def default_top_module(project_name: str) -> str:
    """Derive a legal Verilog module name from *project_name*.

    The project name is used verbatim when it already is one; hyphens become
    underscores and a leading digit gets a ``top_`` prefix.
    """
    module = project_name.replace("-", "_")
    if module[:1].isdigit():
        module = f"top_{module}"
    return module


def validate_top_module(
    top_module: str | None, project_name: str, include_example: bool = False
) -> str:
    """Return the top module name, derived from *project_name* when empty.

    With the example enabled the top module may not reuse a name from
    :data:`EXAMPLE_MODULES`: its file and module would collide with the
    example's.
    """
    top_module = (top_module or "").strip() or default_top_module(project_name)
    if not VERILOG_IDENTIFIER_RE.match(top_module):
        raise InvalidModuleName(
            f"Invalid top module name '{top_module}'. "
            "Use a Verilog identifier: a letter or underscore, then letters, digits or _."
        )
    if include_example and top_module in EXAMPLE_MODULES:
        raise InvalidModuleName(
            f"Top module '{top_module}' clashes with the example design's "
            f"'{top_module}' module. Choose another name or skip the example."
        )
    return top_module


def parse_frequency(raw: str | float | int | None, settings: ScaffoldSettings) -> float:
    """Parse a clock frequency in MHz according to the configured policy.

    Empty input selects ``settings.default_frequency_mhz``.  Malformed or
    zero input, or a frequency so high that the period truncates to
    ``0.00`` ns, either falls back to the default (with a warning) or raises
    :class:`InvalidFrequency`, depending on ``settings.on_invalid_frequency``.
    """
    default = settings.default_frequency_mhz
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default

    text = raw.strip() if isinstance(raw, str) else format_number(raw)
    value = float(text) if FREQUENCY_RE.match(text) else 0.0
    if value > 0 and clock_period(value) > 0:
        return value

    message = f"Invalid frequency '{text}'."
    if settings.on_invalid_frequency == "reject":
        raise InvalidFrequency(
            f"{message} Enter a positive number of MHz, at most {MAX_FREQUENCY_MHZ}."
        )
    print_warning(f"{message} Using default {format_number(default)} MHz.")
    return default


def validate_request(
    project_name: str,
    top_module: str | None = None,
    clock_frequency: str | float | int | None = None,
    include_example: bool = True,
    output_dir: str | Path = Path("."),
    settings: ScaffoldSettings | None = None,
) -> ScaffoldRequest:
    """Validate raw inputs into a :class:`ScaffoldRequest`.

    No filesystem entries are created.

    Raises:
        InvalidName, DirectoryExists, InvalidModuleName, InvalidFrequency
    """
    settings = settings or ScaffoldSettings()
    output_dir = Path(output_dir)
    name = validate_project_name(project_name, output_dir)
    return ScaffoldRequest(
        project_name=name,
        top_module=validate_top_module(top_module, name, include_example),
        clock_frequency_mhz=parse_frequency(clock_frequency, settings),
        include_example=include_example,
        output_dir=output_dir,
    )


# ---------------------------------------------------------------------------
# Interactive collection
# ---------------------------------------------------------------------------


def collect_request(
    prompter: Prompter,
    settings: ScaffoldSettings | None = None,
    output_dir: str | Path | None = None,
) -> ScaffoldRequest:
    """Ask the operator for every input, re-prompting on invalid answers.

    Raises:
        ScaffoldCancelled: The chosen directory exists and the operator
            declined to pick another name.
    """
    settings = settings or ScaffoldSettings()
    output_dir = Path(output_dir) if output_dir is not None else settings.output_dir

    while True:
        raw_name = prompter.ask("Project name (letters, numbers, underscore, hyphen)")
        try:
            name = validate_project_name(raw_name, output_dir)
            break
        except DirectoryExists as exc:
            print_error(f"ERROR: {exc}")
            if not prompter.confirm("Do you want to use a different name?", default=True):
                raise ScaffoldCancelled(str(exc)) from exc
        except InvalidName as exc:
            print_error(f"ERROR: {exc}")

    while True:
        raw_top = prompter.ask("Top module", default=default_top_module(name))
        try:
            top_module = validate_top_module(raw_top, name)
            break
        except InvalidModuleName as exc:
            print_error(f"ERROR: {exc}")

    while True:
        raw_freq = prompter.ask(
            "Clock frequency (MHz)", default=format_number(settings.default_frequency_mhz)
        )
        try:
            frequency = parse_frequency(raw_freq, settings)
            break
        except InvalidFrequency as exc:
            print_error(f"ERROR: {exc}")

    include_example = prompter.confirm(
        "Create example design (counter, top-level wrapper, self-checking testbench)?",
        default=settings.include_example,
    )

    # The example is only known now; a clashing top module is asked again.
    fallback_top = f"{top_module}_top"
    while True:
        try:
            top_module = validate_top_module(top_module, name, include_example)
            break
        except InvalidModuleName as exc:
            print_error(f"ERROR: {exc}")
            top_module = prompter.ask("Top module", default=fallback_top)

    return ScaffoldRequest(
        project_name=name,
        top_module=top_module,
        clock_frequency_mhz=frequency,
        include_example=include_example,
        output_dir=output_dir,
    )
