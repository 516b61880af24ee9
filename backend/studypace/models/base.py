"""
Strict Base Models for API Request/Response Validation

Request bodies reject unknown fields so that client typos fail with a 422
instead of being silently dropped; response bodies convert straight from
SQLAlchemy rows.

Usage:
    # For request bodies (strictest validation)
    class CategoryCreate(StrictRequest):
        name: str
        total: int

    # For response bodies (allows extra fields from DB)
    class CategoryResponse(StrictResponse):
        id: int
        name: str

Architecture:
    API Request → StrictRequest (extra="forbid") → Route Handler
    DB Model → StrictResponse (extra="ignore") → API Response
"""

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for API request bodies with strict validation.

    Features:
        - extra="forbid": Unknown fields raise 422 Unprocessable Entity
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
        - from_attributes=True: Allows ORM model conversion
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class StrictResponse(BaseModel):
    """
    Base model for API response bodies.

    Features:
        - extra="ignore": Silently ignores extra fields (DB may have more columns)
        - validate_default=True: Validates default values
        - from_attributes=True: Allows ORM model conversion

    Example:
        >>> CategoryResponse.model_validate(db_category)
    """

    model_config = ConfigDict(
        extra="ignore",
        validate_default=True,
        from_attributes=True,
    )


class SuccessResponse(StrictResponse):
    """
    Simple success response for operations without complex output.

    Example usage:
        @router.delete("/categories/{id}", response_model=SuccessResponse)
        async def delete_category(id: int):
            ...
            return SuccessResponse(message="Category deleted")
    """

    success: bool = True
    message: str
