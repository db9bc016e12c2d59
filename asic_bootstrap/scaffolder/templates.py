"""Jinja2 template registry and rendering for project scaffolding.

Templates live under ``asic_bootstrap/scaffolder/templates/``.  Each one is
registered as a :class:`Template` declaring the variables it needs; the
declaration is checked against the template source when it is registered,
so a placeholder that nothing binds (or a declared variable that nothing
uses) is caught before any project is generated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    UndefinedError,
    meta,
)

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateAuthoringError(ValueError):
    """A template's declared variables do not match what its source uses."""


@dataclass(frozen=True)
class Template:
    """A named template bound to a target path inside the project.

    ``target`` is itself a Jinja2 expression (``"sources/rtl/{{ top_module }}.v"``)
    rendered with the same context as the source.
    """

    name: str
    source: str
    target: str
    variables: frozenset[str] = field(default_factory=frozenset)
    optional_variables: frozenset[str] = field(default_factory=frozenset)
    example_only: bool = False


def make_environment(template_dir: str | Path | None = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(template_dir or _DEFAULT_TEMPLATE_DIR)),
        undefined=StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["verilog_bits"] = _verilog_bits_filter
    return env


# ---------------------------------------------------------------------------
# TemplateRegistry
# ---------------------------------------------------------------------------


class TemplateRegistry:
    """Ordered collection of validated templates."""

    def __init__(
        self,
        templates: Iterable[Template] = (),
        template_dir: str | Path | None = None,
    ) -> None:
        self.env = make_environment(template_dir)
        self._templates: dict[str, Template] = {}
        for template in templates:
            self.register(template)

    def __iter__(self) -> Iterator[Template]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    def __contains__(self, name: object) -> bool:
        return name in self._templates

    def get(self, name: str) -> Template:
        return self._templates[name]

    def register(self, template: Template) -> Template:
        """Validate *template* against its source and add it.

        Raises:
            TemplateAuthoringError: Duplicate name, missing source, a
                referenced variable that is not declared, or a required
                variable that is never referenced.
        """
        if template.name in self._templates:
            raise TemplateAuthoringError(f"Template {template.name!r} is already registered")

        referenced = self.referenced_variables(template)
        declared = template.variables | template.optional_variables

        undeclared = referenced - declared
        if undeclared:
            raise TemplateAuthoringError(
                f"Template {template.name!r} uses undeclared variables: "
                f"{', '.join(sorted(undeclared))}"
            )
        unused = template.variables - referenced
        if unused:
            raise TemplateAuthoringError(
                f"Template {template.name!r} declares variables it never uses: "
                f"{', '.join(sorted(unused))}"
            )

        self._templates[template.name] = template
        return template

    def referenced_variables(self, template: Template) -> set[str]:
        """Every free variable used by *template*'s source and target path."""
        try:
            source, _, _ = self.env.loader.get_source(self.env, template.source)
        except TemplateNotFound as exc:
            raise TemplateAuthoringError(
                f"Template {template.name!r}: cannot load source {template.source!r}: {exc}"
            ) from exc
        referenced = meta.find_undeclared_variables(self.env.parse(source))
        referenced |= meta.find_undeclared_variables(self.env.parse(template.target))
        return set(referenced)

    # -- Rendering -----------------------------------------------------------

    def render(self, name: str, context: dict[str, Any]) -> tuple[PurePosixPath, str]:
        """Render template *name* and its target path.

        Raises:
            jinja2.UndefinedError: A required variable is missing from *context*.
        """
        template = self._templates[name]
        missing = template.variables - context.keys()
        if missing:
            raise UndefinedError(
                f"Template {name!r} needs variables that were not supplied: "
                f"{', '.join(sorted(missing))}"
            )
        content = self.env.get_template(template.source).render(**context)
        target = self.env.from_string(template.target).render(**context)
        return PurePosixPath(target), content

    def select(self, include_example: bool) -> list[Template]:
        return [t for t in self if include_example or not t.example_only]


# ---------------------------------------------------------------------------
# Built-in project templates
# ---------------------------------------------------------------------------

PROJECT_TEMPLATES: tuple[Template, ...] = (
    Template(
        name="makefile",
        source="Makefile.j2",
        target="Makefile",
        variables=frozenset({
            "project_name", "top_module", "testbench_name", "clock_period",
            "targets", "default_target", "openlane_root", "pdk_root",
        }),
    ),
    Template(
        name="sdc",
        source="constraints.sdc.j2",
        target="sources/constraints/{{ top_module }}.sdc",
        variables=frozenset({"top_module", "clock_frequency", "clock_period", "default_target"}),
    ),
    Template(
        name="rtl-list",
        source="rtl_list.f.j2",
        target="sources/rtl_list.f",
        variables=frozenset({"project_name", "testbench_name", "rtl_files", "testbench_files"}),
    ),
    Template(name="gitignore", source="gitignore.j2", target=".gitignore"),
    Template(
        name="readme",
        source="README.md.j2",
        target="README.md",
        variables=frozenset({
            "project_name", "top_module", "clock_frequency", "clock_period",
            "targets", "default_target", "include_example",
        }),
    ),
    Template(
        name="tapeout-checklist",
        source="TAPEOUT_CHECKLIST.md.j2",
        target="docs/TAPEOUT_CHECKLIST.md",
        variables=frozenset({"project_name"}),
    ),
    Template(
        name="counter",
        source="example/counter.v.j2",
        target="sources/rtl/counter.v",
        variables=frozenset({"counter_width"}),
        optional_variables=frozenset({"project_name"}),
        example_only=True,
    ),
    Template(
        name="top",
        source="example/top.v.j2",
        target="sources/rtl/{{ top_module }}.v",
        variables=frozenset({"project_name", "top_module", "clock_frequency", "counter_width"}),
        example_only=True,
    ),
    Template(
        name="testbench",
        source="example/top_tb.v.j2",
        target="sources/tb/{{ testbench_name }}.v",
        variables=frozenset({
            "top_module", "testbench_name", "clock_frequency", "clock_period",
            "counter_width", "stimulus",
        }),
        example_only=True,
    ),
)


def default_registry(template_dir: str | Path | None = None) -> TemplateRegistry:
    """A registry holding the built-in project templates."""
    return TemplateRegistry(PROJECT_TEMPLATES, template_dir=template_dir)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------


def _verilog_bits_filter(value: int, width: int) -> str:
    """Format *value* as a sized Verilog decimal literal, e.g. ``8'd10``."""
    return f"{width}'d{int(value)}"
