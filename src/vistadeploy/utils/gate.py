"""Environment gate: required configuration must be present before network stages"""
from typing import Iterable

from vistadeploy.exceptions import MissingRequiredError
from vistadeploy.utils.config import DeployConfig, ENV_VARS

# Settings that must be present before anything touches the device
DEPLOY_REQUIRED = frozenset({'TARGET_IP'})


class EnvironmentGate:
    """Checks that required settings are set and non-empty. Has no side effects."""

    def __init__(self, config: DeployConfig):
        self.config = config

    def check(self, required: Iterable[str] = DEPLOY_REQUIRED) -> None:
        """
        Raises:
            MissingRequiredError: For the first (sorted) setting that is unset
                or blank
        """
        for name in sorted(required):
            value = self.config.value(name)
            if value is None or not str(value).strip():
                raise MissingRequiredError(name, hint=_hint(name))


def _hint(name: str) -> str:
    if name in ENV_VARS:
        flag = '--' + ENV_VARS[name].replace('_', '-')
        return (
            f"Set it via:\n"
            f"  export {name}=<value>\n"
            f"  or\n"
            f"  vistadeploy deploy {flag} <value>"
        )
    return f"Set '{name}' in the config file"
