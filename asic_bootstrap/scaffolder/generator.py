"""Main scaffolding orchestrator.

Turns a validated :class:`ScaffoldRequest` into files on disk in two
separate phases:

1. :func:`render_templates` is pure.  It renders every selected template,
   the per-target OpenLane configs and the ``.gitkeep`` placeholders into
   :class:`RenderedFile` objects without touching the filesystem.
2. :func:`materialize` checks the whole plan first, then creates every
   directory and writes every file exactly once.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..config import Config
from ..pdks import default_pdk, get_pdk
from ..utils import print_info
from .example import COUNTER_WIDTH, EXAMPLE_STIMULUS
from .layout import ProjectLayout, build_layout
from .request import ScaffoldRequest
from .targets import TARGET_IDS, build_target_configs, dump_target_config
from .templates import TemplateRegistry, default_registry

GITKEEP_DIRS: tuple[str, ...] = ("sources/include", "vendor", "ip", "sim/waves")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class RenderedFile(BaseModel):
    """One file of the generated project, ready to be written."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    path: PurePosixPath = Field(..., description="Path relative to the project root")
    content: str = ""
    source: str = Field(default="", description="Template or generator that produced it")


class MaterializeResult(BaseModel):
    """What :func:`materialize` created."""

    root: Path
    directories: list[Path] = Field(default_factory=list)
    files: list[Path] = Field(default_factory=list)


class MaterializeError(Exception):
    """Creating the project failed at ``path``."""

    def __init__(self, path: Path | PurePosixPath, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot create {path}: {reason}")


# ---------------------------------------------------------------------------
# RenderTemplates
# ---------------------------------------------------------------------------


def example_sources(request: ScaffoldRequest) -> tuple[list[str], list[str]]:
    """RTL and testbench paths of the example design, relative to the root."""
    if not request.include_example:
        return [], []
    rtl = ["sources/rtl/counter.v", f"sources/rtl/{request.top_module}.v"]
    testbenches = [f"sources/tb/{request.testbench_name}.v"]
    return rtl, testbenches


def build_context(
    request: ScaffoldRequest,
    config: Config | None = None,
    targets: Sequence[str] = TARGET_IDS,
) -> dict[str, Any]:
    """Every variable the built-in templates may reference."""
    config = config or Config()
    rtl_files, testbench_files = example_sources(request)
    return {
        "project_name": request.project_name,
        "top_module": request.top_module,
        "testbench_name": request.testbench_name,
        "clock_frequency": request.clock_frequency_text,
        "clock_period": request.clock_period_text,
        "include_example": request.include_example,
        "targets": [get_pdk(target) for target in targets],
        "default_target": default_pdk(),
        "openlane_root": str(config.openlane_dir),
        "pdk_root": str(config.pdk_root),
        "rtl_files": rtl_files,
        "testbench_files": testbench_files,
        "counter_width": COUNTER_WIDTH,
        "stimulus": list(EXAMPLE_STIMULUS),
    }


def render_templates(
    request: ScaffoldRequest,
    layout: ProjectLayout,
    registry: TemplateRegistry | None = None,
    config: Config | None = None,
    targets: Sequence[str] = TARGET_IDS,
) -> list[RenderedFile]:
    """Render the complete file set for *request*.  No filesystem writes.

    Example-only templates are skipped unless ``request.include_example``.
    """
    registry = registry or default_registry()
    context = build_context(request, config, targets)
    files: list[RenderedFile] = []

    for template in registry.select(request.include_example):
        path, content = registry.render(template.name, context)
        files.append(RenderedFile(path=path, content=content, source=template.source))

    rtl_files, _ = example_sources(request)
    for target, target_config in build_target_configs(request, rtl_files, targets).items():
        files.append(
            RenderedFile(
                path=PurePosixPath("config") / f"{target}.json",
                content=dump_target_config(target_config),
                source="targets",
            )
        )

    for directory in GITKEEP_DIRS:
        placeholder = PurePosixPath(directory) / ".gitkeep"
        if layout.contains(placeholder):
            files.append(RenderedFile(path=placeholder, source="gitkeep"))

    return files


# ---------------------------------------------------------------------------
# Materialize
# ---------------------------------------------------------------------------


def check_plan(layout: ProjectLayout, files: Sequence[RenderedFile]) -> None:
    """Reject a plan before anything is created.

    Raises:
        MaterializeError: The project root exists, two files share a path,
            or a file's directory is not part of *layout*.
    """
    if layout.root.exists():
        raise MaterializeError(layout.root, "project directory already exists")

    seen: set[PurePosixPath] = set()
    for rendered in files:
        if rendered.path.is_absolute() or ".." in rendered.path.parts:
            raise MaterializeError(rendered.path, "path escapes the project root")
        if rendered.path in seen:
            raise MaterializeError(rendered.path, "rendered more than once")
        if not layout.contains(rendered.path):
            raise MaterializeError(rendered.path, "directory is not part of the project layout")
        seen.add(rendered.path)


def materialize(layout: ProjectLayout, files: Sequence[RenderedFile]) -> MaterializeResult:
    """Create the layout's directories, then write each file exactly once.

    Files are opened in exclusive-create mode.  The first failure stops the
    call; files already written are left in place.

    Raises:
        MaterializeError: Names the first path that could not be created.
    """
    check_plan(layout, files)
    result = MaterializeResult(root=layout.root)

    try:
        layout.root.mkdir(parents=True)
    except OSError as exc:
        raise MaterializeError(layout.root, exc.strerror or str(exc)) from exc
    result.directories.append(layout.root)

    for directory in layout.directories:
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise MaterializeError(directory, exc.strerror or str(exc)) from exc
        result.directories.append(directory)

    for rendered in files:
        target = layout.root / rendered.path
        try:
            with target.open("x", encoding="utf-8", newline="\n") as fh:
                fh.write(rendered.content)
        except OSError as exc:
            raise MaterializeError(target, exc.strerror or str(exc)) from exc
        result.files.append(target)

    return result


# ---------------------------------------------------------------------------
# ProjectGenerator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Generates a project directory for one request.

    Usage::

        generator = ProjectGenerator(request)
        result = generator.generate()
    """

    def __init__(
        self,
        request: ScaffoldRequest,
        config: Config | None = None,
        registry: TemplateRegistry | None = None,
        targets: Sequence[str] = TARGET_IDS,
    ) -> None:
        self.request = request
        self.config = config or Config()
        self.registry = registry or default_registry()
        self.targets = tuple(targets)

    def build_layout(self) -> ProjectLayout:
        return build_layout(self.request, self.targets)

    def render_templates(self, layout: ProjectLayout | None = None) -> list[RenderedFile]:
        return render_templates(
            self.request,
            layout or self.build_layout(),
            registry=self.registry,
            config=self.config,
            targets=self.targets,
        )

    def generate(self) -> MaterializeResult:
        """Render everything, then write it under ``request.project_root``."""
        layout = self.build_layout()
        files = self.render_templates(layout)
        print_info(f"Creating {len(layout.relative_dirs)} directories and {len(files)} files")
        result = materialize(layout, files)
        for path in result.files:
            print_info(f"  -> {path.relative_to(layout.root).as_posix()}")
        return result
