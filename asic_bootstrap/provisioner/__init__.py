"""asic-bootstrap provisioner -- installs and verifies the ASIC toolchain.

Quick usage::

    from asic_bootstrap.config import Config
    from asic_bootstrap.provisioner import HostContext, ProvisioningEngine, build_toolchain_steps

    config = Config()
    host = HostContext.from_config(config)
    engine = ProvisioningEngine(build_toolchain_steps(config, host))
    run = engine.run_steps(interactive=False)
    run.raise_for_failure()
"""

from asic_bootstrap.provisioner.engine import ProvisioningEngine, StepGraphError
from asic_bootstrap.provisioner.host import (
    Capabilities,
    EnvironmentCheckError,
    HostContext,
    InsufficientResources,
    MissingRuntime,
    preflight,
)
from asic_bootstrap.provisioner.recipes import ToolchainRecipe, build_toolchain_steps
from asic_bootstrap.provisioner.steps import (
    InstallStep,
    ProvisioningRun,
    StepFailure,
    StepOutcome,
    StepRecord,
)

__all__ = [
    "Capabilities",
    "EnvironmentCheckError",
    "HostContext",
    "InstallStep",
    "InsufficientResources",
    "MissingRuntime",
    "ProvisioningEngine",
    "ProvisioningRun",
    "StepFailure",
    "StepGraphError",
    "StepOutcome",
    "StepRecord",
    "ToolchainRecipe",
    "build_toolchain_steps",
    "preflight",
]
