'''
Shared pydantic configuration for every API model.
'''
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, StringConstraints
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Serialises to camelCase (what the frontend reads) while still accepting
    snake_case field names on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel):
    """The success half of the `{success, message}` response envelope."""
    success: bool = True
    message: Optional[str] = None


# Trimmed before the length check, so "   " is rejected instead of stored as "".
NonBlankStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
