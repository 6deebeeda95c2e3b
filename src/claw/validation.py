# src/claw/validation.py
from typing import Dict, List, Sequence

from claw.config import GoalParameter
from claw.errors import MissingParametersError


class ParameterValidator:
    """Checks template arguments against a goal's declared parameters."""

    def __init__(self, parameters: Sequence[GoalParameter], goal_name: str):
        self.parameters = list(parameters)
        self.goal_name = goal_name

    def validate(self, args: Dict[str, str]) -> Dict[str, str]:
        """
        Returns the arguments with defaults filled in for absent optional
        parameters. Raises MissingParametersError if a required parameter is
        absent. A goal without parameter definitions accepts anything as-is.
        """
        if not self.parameters:
            return dict(args)

        missing = self.get_missing_required(args)
        if missing:
            raise MissingParametersError(self.goal_name, missing)

        resolved = dict(args)
        for param in self.parameters:
            if param.name not in resolved and param.default is not None:
                resolved[param.name] = param.default
        return resolved

    def get_missing_required(self, args: Dict[str, str]) -> List[GoalParameter]:
        return [p for p in self.parameters if p.required and p.name not in args]
