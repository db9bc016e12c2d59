"""asic-bootstrap scaffolder -- creates OpenLane-ready ASIC project trees.

Takes a validated :class:`ScaffoldRequest` and renders a project with a
Makefile, per-PDK OpenLane configs, SDC constraints, an RTL file list,
documentation and (optionally) an example counter design with a
self-checking testbench.

Quick usage::

    from asic_bootstrap.scaffolder import ProjectGenerator, validate_request

    request = validate_request("blinker", clock_frequency="50", output_dir="/tmp")
    result = ProjectGenerator(request).generate()
"""

from asic_bootstrap.scaffolder.example import (
    EXAMPLE_STIMULUS,
    CounterReference,
    StimulusPhase,
    TestbenchTally,
    run_stimulus,
)
from asic_bootstrap.scaffolder.generator import (
    MaterializeError,
    MaterializeResult,
    ProjectGenerator,
    RenderedFile,
    materialize,
    render_templates,
)
from asic_bootstrap.scaffolder.layout import ProjectLayout, build_layout
from asic_bootstrap.scaffolder.request import (
    DirectoryExists,
    InvalidFrequency,
    InvalidModuleName,
    InvalidName,
    RequestValidationError,
    ScaffoldCancelled,
    ScaffoldRequest,
    collect_request,
    validate_request,
)
from asic_bootstrap.scaffolder.targets import (
    BASE_TARGET_CONFIG,
    TARGET_OVERRIDES,
    build_target_configs,
)
from asic_bootstrap.scaffolder.templates import (
    Template,
    TemplateAuthoringError,
    TemplateRegistry,
    default_registry,
)

__all__ = [
    "BASE_TARGET_CONFIG",
    "CounterReference",
    "DirectoryExists",
    "EXAMPLE_STIMULUS",
    "InvalidFrequency",
    "InvalidModuleName",
    "InvalidName",
    "MaterializeError",
    "MaterializeResult",
    "ProjectGenerator",
    "ProjectLayout",
    "RenderedFile",
    "RequestValidationError",
    "ScaffoldCancelled",
    "ScaffoldRequest",
    "StimulusPhase",
    "TARGET_OVERRIDES",
    "Template",
    "TemplateAuthoringError",
    "TemplateRegistry",
    "TestbenchTally",
    "build_layout",
    "build_target_configs",
    "collect_request",
    "default_registry",
    "materialize",
    "render_templates",
    "validate_request",
]
