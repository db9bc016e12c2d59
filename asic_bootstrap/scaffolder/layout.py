"""Directory layout of a generated project."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path, PurePosixPath

from pydantic import BaseModel, ConfigDict

from .request import ScaffoldRequest
from .targets import TARGET_IDS

SOURCE_DIRS: tuple[str, ...] = (
    "sources/rtl",
    "sources/tb",
    "sources/include",
    "sources/constraints",
)
SIM_DIRS: tuple[str, ...] = ("sim/waves", "sim/logs")
OUTPUT_DIRS: tuple[str, ...] = ("layout", "reports", "verification")
SUPPORT_DIRS: tuple[str, ...] = ("docs", "scripts", "vendor", "ip")


class ProjectLayout(BaseModel):
    """The project root and the ordered set of directories beneath it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    root: Path
    relative_dirs: tuple[PurePosixPath, ...]

    @property
    def directories(self) -> list[Path]:
        """Absolute paths of every declared directory, in creation order."""
        return [self.root / rel for rel in self.relative_dirs]

    def contains(self, relative_file: str | PurePosixPath) -> bool:
        """Whether *relative_file* would land in a declared directory.

        The project root and every ancestor of a declared directory count
        as declared.
        """
        parent = PurePosixPath(relative_file).parent
        if parent == PurePosixPath("."):
            return True
        return parent in self._declared()

    def _declared(self) -> set[PurePosixPath]:
        declared: set[PurePosixPath] = set()
        for rel in self.relative_dirs:
            declared.add(rel)
            declared.update(p for p in rel.parents if p != PurePosixPath("."))
        return declared


def build_layout(request: ScaffoldRequest, targets: Sequence[str] = TARGET_IDS) -> ProjectLayout:
    """Return the fixed directory set for *request*.

    Only ``designs/<top>`` and ``runs/<target>`` vary between projects.
    """
    dirs = [
        *SOURCE_DIRS,
        *SIM_DIRS,
        f"designs/{request.top_module}",
        "config",
        *(f"runs/{target}" for target in targets),
        *OUTPUT_DIRS,
        *SUPPORT_DIRS,
    ]
    return ProjectLayout(
        root=request.project_root,
        relative_dirs=tuple(PurePosixPath(d) for d in dirs),
    )
