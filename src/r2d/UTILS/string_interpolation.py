"""
Utilities for substituting environment variables into configuration text.
"""
import re
from typing import Mapping

_VARIABLE = re.compile(r"\$\{([^}:]+)(?::(-|\+)([^}]*))?\}")


class EnvironmentInterpolator:
    """
    Replaces ${VAR}, ${VAR:-default} and ${VAR:+value} references.
    """
    @staticmethod
    def interpolate(template: str, context: Mapping[str, str], strict: bool = True) -> str:
        """
        Interpolates variables in the template string using the provided context.

        :param template: Text containing ${VAR} references.
        :param context: Variable values.
        :param strict: Raise for a plain ${VAR} that is not set; otherwise it
            becomes an empty string.
        :return: The interpolated text.
        :raises KeyError: If a variable is missing in strict mode.
        """
        def replace(match):
            name, modifier, alternative = match.groups()
            value = context.get(name)

            if modifier == "-":
                return value if value else alternative
            if modifier == "+":
                return alternative if value else ""
            if value is None:
                if strict:
                    raise KeyError(f"Variable {name} not found in context")
                return ""
            return value

        return _VARIABLE.sub(replace, template)
