"""Pipeline: validate → build → package → locate → transfer → install → cleanup

Stages run strictly in order and each one gates the next. The first failure
moves the run to FAILED and nothing after it is attempted. Cleanup problems
after a successful install are reported as warnings only.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional

from vistadeploy.core import (
    ConsoleLogger,
    Logger,
    RealFileSystemService,
    SubprocessExecutor,
    SystemToolLocator,
)
from vistadeploy.deploy.base import Deployer, DeploymentResult, RemoteTarget
from vistadeploy.deploy.factory import target_from_config
from vistadeploy.deploy.ssh_deployer import SSHDeployer
from vistadeploy.exceptions import ConfigError, OutputMissingError, VistaDeployError
from vistadeploy.utils.config import DeployConfig
from vistadeploy.utils.gate import EnvironmentGate, DEPLOY_REQUIRED
from vistadeploy.utils.locator import ArtifactLocator
from vistadeploy.utils.stages import PackageStage, StageRunner, webui_target


class PipelineState(Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING = "building"
    PACKAGING = "packaging"
    LOCATING = "locating"
    TRANSFERRING = "transferring"
    INSTALLING = "installing"
    CLEANING_UP = "cleaning up"
    DONE = "done"
    FAILED = "failed"


GOALS = ('build', 'package', 'deploy')

# Deployer step name -> pipeline state
_DEPLOY_STEPS = {
    "locate": PipelineState.LOCATING,
    "transfer": PipelineState.TRANSFERRING,
    "install": PipelineState.INSTALLING,
    "cleanup": PipelineState.CLEANING_UP,
}


@dataclass
class StageOutcome:
    """Terminal status of one stage."""
    state: PipelineState
    success: bool
    error: Optional[VistaDeployError] = None
    warnings: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def cause(self) -> str:
        return str(self.error) if self.error else ""


@dataclass
class PipelineResult:
    """
    Ordered stage outcomes of one run.

    The run fails with the first failing stage; there is no partial success.
    """
    goal: str
    state: PipelineState = PipelineState.IDLE
    outcomes: List[StageOutcome] = field(default_factory=list)
    artifact: Optional[Path] = None
    deployment: Optional[DeploymentResult] = None

    @property
    def success(self) -> bool:
        return self.state == PipelineState.DONE

    @property
    def failure(self) -> Optional[StageOutcome]:
        for outcome in self.outcomes:
            if not outcome.success:
                return outcome
        return None

    @property
    def warnings(self) -> List[str]:
        return [w for outcome in self.outcomes for w in outcome.warnings]

    def stages(self) -> List[PipelineState]:
        return [outcome.state for outcome in self.outcomes]


class Pipeline:
    """
    Composes the stages into the ordered workflow for a goal.

    Goals:
        build    BUILDING
        package  BUILDING → PACKAGING → LOCATING
        deploy   VALIDATING → BUILDING → PACKAGING (if no IPK yet) →
                 LOCATING → TRANSFERRING → INSTALLING → CLEANING_UP
    """

    def __init__(
        self,
        config: DeployConfig,
        gate: EnvironmentGate,
        stage_runner: StageRunner,
        packager: PackageStage,
        deployer: Deployer,
        logger: Logger
    ):
        self.config = config
        self.gate = gate
        self.runner = stage_runner
        self.packager = packager
        self.deployer = deployer
        self.log = logger
        self._result: Optional[PipelineResult] = None

    def _enter(self, state: PipelineState) -> None:
        """Close the running stage as successful and start the next one."""
        result = self._result
        if result.state not in (PipelineState.IDLE, PipelineState.DONE):
            result.outcomes.append(StageOutcome(result.state, success=True))
        result.state = state

    def _skip(self, state: PipelineState) -> None:
        self._enter(state)
        self._result.outcomes.append(StageOutcome(state, success=True, skipped=True))
        self._result.state = PipelineState.IDLE

    def _fail(self, error: VistaDeployError) -> None:
        result = self._result
        result.outcomes.append(StageOutcome(result.state, success=False, error=error))
        self.log.error(f"✗ {result.state.value.capitalize()} failed: {error}")
        result.state = PipelineState.FAILED

    def _finish(self, warnings: Optional[List[str]] = None) -> None:
        result = self._result
        result.outcomes.append(
            StageOutcome(result.state, success=True, warnings=list(warnings or []))
        )
        result.state = PipelineState.DONE

    def run(
        self,
        goal: str = 'deploy',
        target: Optional[RemoteTarget] = None,
        force_package: bool = False
    ) -> PipelineResult:
        """
        Run the stages for goal.

        Args:
            goal: 'build', 'package' or 'deploy'
            target: Device for 'deploy' (default: built from config after
                validation)
            force_package: Re-package even if an IPK is already present

        Returns:
            PipelineResult ending in DONE or FAILED
        """
        if goal not in GOALS:
            raise ValueError(f"Unknown goal '{goal}', expected one of {GOALS}")

        self._result = PipelineResult(goal=goal)
        try:
            if goal == 'deploy':
                self._enter(PipelineState.VALIDATING)
                self.gate.check(DEPLOY_REQUIRED)
                if target is None:
                    target = self._target()

            self._enter(PipelineState.BUILDING)
            self.runner.run(webui_target(self.config))

            if goal == 'build':
                self._finish()
                return self._result

            if goal == 'deploy' and not force_package and self.packager.locate() is not None:
                self.log.info("IPK already built; skipping package stage")
                self._skip(PipelineState.PACKAGING)
            else:
                self._enter(PipelineState.PACKAGING)
                self.packager.run()

            if goal == 'package':
                self._enter(PipelineState.LOCATING)
                self._result.artifact = self._locate_or_fail()
                self._finish()
                return self._result

            deployment = self.deployer.deploy(
                self.packager.locate(),
                target,
                progress=lambda step: self._enter(_DEPLOY_STEPS[step])
            )
            self._result.artifact = deployment.artifact
            self._result.deployment = deployment
            self._finish(deployment.warnings)
        except VistaDeployError as e:
            self._fail(e)

        return self._result

    def _target(self) -> RemoteTarget:
        try:
            return target_from_config(self.config)
        except ValueError as e:
            raise ConfigError(f"Invalid TARGET_IP '{self.config.target_ip}': {e}")

    def _locate_or_fail(self) -> Path:
        artifact = self.packager.locate()
        if artifact is None:
            raise OutputMissingError(
                self.config.ipk_dir / self.config.artifact_pattern,
                hint="IPK not found - check build output"
            )
        return artifact


def create_pipeline(config: DeployConfig, logger: Optional[Logger] = None, verbose: bool = False) -> Pipeline:
    """Pipeline wired with production dependencies."""
    filesystem = RealFileSystemService()
    process = SubprocessExecutor()
    log = logger or ConsoleLogger(verbose=verbose)
    locator = ArtifactLocator(filesystem, order=config.artifact_order)

    packager = PackageStage(
        config,
        filesystem=filesystem,
        process_executor=process,
        tool_locator=SystemToolLocator(),
        locator=locator,
        logger=log,
        verbose=verbose
    )
    deployer = SSHDeployer(
        filesystem=filesystem,
        process_executor=process,
        logger=log,
        locator=locator,
        search_dir=config.ipk_dir,
        pattern=config.artifact_pattern,
        repackage=packager.run
    )
    return Pipeline(
        config,
        gate=EnvironmentGate(config),
        stage_runner=StageRunner(filesystem, process, log, verbose=verbose),
        packager=packager,
        deployer=deployer,
        logger=log
    )


def report_result(result: PipelineResult, title: str) -> int:
    """Print a stage summary for result and return the exit code."""
    print()
    print("=" * 80)
    if result.success:
        print(f"✓ {title} complete!")
    else:
        failure = result.failure
        stage = failure.state.value if failure else result.state.value
        print(f"✗ {title} failed at stage: {stage}")
    print("=" * 80)

    for outcome in result.outcomes:
        if outcome.skipped:
            symbol = '⊙'
        elif outcome.success:
            symbol = '✓'
        else:
            symbol = '✗'
        print(f"  {symbol} {outcome.state.value}")

    if result.warnings:
        print("\nWarnings:")
        for warning in result.warnings:
            print(f"  ⚠ {warning}")

    return 0 if result.success else 1
