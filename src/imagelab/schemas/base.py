"""
Base schema for filter parameters.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BaseFilterParams(BaseModel):
    """Base class for filter parameter models. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")

    def overrides(self) -> Dict[str, Any]:
        """
        Parameters that differ from the model defaults.

        Used to keep log lines short: a blur run with only a larger kernel
        logs as {'kernel_size': 5}.

        Example:
            >>> FilterParams(gamma=2.2).overrides()
            {'gamma': 2.2}
        """
        defaults = type(self)()
        return {
            name: value
            for name, value in self.model_dump().items()
            if value != getattr(defaults, name)
        }
