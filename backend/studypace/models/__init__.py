"""
Pydantic API models.

- base.py: StrictRequest / StrictResponse base classes
- progress.py: Category, course, checklist, daily entry and streak schemas
"""

from studypace.models.base import StrictRequest, StrictResponse, SuccessResponse

__all__ = ["StrictRequest", "StrictResponse", "SuccessResponse"]
