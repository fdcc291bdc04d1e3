"""
Base schemas for all models.
"""

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base for all schemas.

    Features:
        - Auto-trim whitespace from strings
        - Validate on attribute assignment
        - Allow ORM objects (from_attributes)
        - Accept field names as well as camelCase aliases
    """
    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True
    )


class ValueSchema(BaseModel):
    """
    Base for immutable value objects built per query.

    Frozen, so instances are hashable and safe to share between folds.
    """
    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True
    )
