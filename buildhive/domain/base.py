"""Base model for payloads coming back from the marketplace API."""
from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator

from buildhive.core.casing import to_snake


class ApiModel(BaseModel):
    """Accepts both snake_case and camelCase keys; unknown keys are ignored.

    The backend is inconsistent (``fullName`` on auth responses, ``full_name``
    on profile responses), so keys are normalized to snake_case before field
    validation. An explicit snake_case key wins over its camelCase twin.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        coerce_numbers_to_str=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _snake_case_keys(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        normalized: dict[str, Any] = {}
        for key, value in data.items():
            if not isinstance(key, str):
                continue
            snake = to_snake(key)
            if snake != key and snake in data:
                continue
            normalized[snake] = value
        return normalized
