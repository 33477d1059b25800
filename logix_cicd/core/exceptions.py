"""
Base exception hierarchy

Every error raised by logix_cicd names the pipeline component it came from
and, where an operator can do something about it, a hint printed under the
message in the job log. Components and default hints are class attributes,
so subclasses can mix the base errors (e.g. a revision error is both a
deployment error and an input validation error).
"""


class LogixCicdError(Exception):
    """
    Base exception for the CI/CD pipeline

    Attributes:
        message: Error message without component or hint
        component: Pipeline component that raised the error
        recovery_hint: What the operator should check
    """

    component = "Pipeline"
    default_hint = ""

    def __init__(self, message: str, component: str = "", recovery_hint: str = ""):
        self.message = message
        self.component = component or type(self).component
        self.recovery_hint = recovery_hint or type(self).default_hint
        super().__init__(message)

    def __str__(self) -> str:
        text = f"[{self.component}] {self.message}" if self.component else self.message
        if self.recovery_hint:
            text += f"\n    Hint: {self.recovery_hint}"
        return text


class ConfigurationError(LogixCicdError):
    """A tool, SDK or setting the pipeline needs is missing or wrong"""

    component = "Settings"
    default_hint = "Check FLASH_TOOL_PATH, CONTROLLER_TYPES and the other settings in the environment or .env file"


class ValidationError(LogixCicdError):
    """Bad input from the device list, a policy file or the command line"""

    component = "Input"


class ResourceNotFoundError(LogixCicdError):
    """A folder or file the pipeline works on does not exist"""

    component = "Filesystem"

    def __init__(self, resource: str, identifier: str, recovery_hint: str = ""):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            f"{resource} not found: {identifier}",
            recovery_hint=recovery_hint
            or f"Check that the repository checkout contains '{identifier}' or fix the path given to the job",
        )
