# src/claw/errors.py


class ClawError(Exception):
    """Base class for every failure the CLI reports to the user."""


class ConfigError(ClawError):
    pass


class GoalNotFoundError(ClawError):
    def __init__(self, goal_name: str):
        self.goal_name = goal_name
        super().__init__(f"Goal '{goal_name}' not found in local or global configuration.")


class GoalArgumentError(ClawError):
    pass


class DiscoveryError(ClawError):
    """A context path is missing or a directory walk failed. Always fatal."""


class ContextAbortedError(ClawError):
    """Context processing stopped by the error handling mode or by the user."""


class TemplateRenderError(ClawError):
    pass


class ScriptError(ClawError):
    pass


class LLMCommandError(ClawError):
    def __init__(self, message: str, returncode=None):
        self.returncode = returncode
        super().__init__(message)


class MissingParametersError(ClawError):
    """Raised when a goal is invoked without all of its required parameters."""

    def __init__(self, goal_name: str, missing_params):
        self.goal_name = goal_name
        self.missing_params = list(missing_params)
        super().__init__(self._render())

    @property
    def missing_names(self):
        return [p.name for p in self.missing_params]

    def _render(self) -> str:
        lines = [f"Goal '{self.goal_name}' is missing required parameters:", ""]
        for param in self.missing_params:
            flag = f"  --{param.name}"
            if param.param_type:
                flag += f" <{param.param_type.value}>"
            lines.append(flag)
            lines.append(f"      {param.description}")
        lines.append("")
        lines.append(f"Run 'claw {self.goal_name} --explain' for more information.")
        return "\n".join(lines)
