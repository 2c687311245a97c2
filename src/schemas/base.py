"""
Base schemas for tool parameters.

Provides the base class shared by every tool parameter model.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class BaseToolParams(BaseModel):
    """
    Base class for all tool parameter models.

    Provides common functionality including:
    - to_dict() method with enum conversion
    - Consistent configuration (unknown fields are rejected)
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=False)

    def to_dict(self) -> Dict[str, Any]:
        """
        Export parameters to a plain dictionary.

        Enum members are converted to their string values.

        Example:
            >>> params = ConvertParams(format=ImageFormat.PNG)
            >>> params.to_dict()
            {'format': 'png', 'quality': 0.9}
        """
        return self.model_dump(mode="json", exclude_none=True)
