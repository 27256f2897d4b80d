"""
Input validation schemas using Pydantic.
Provides type-safe validation for API endpoints.
"""
from typing import List, Dict, Any, Callable
from pydantic import BaseModel, Field, field_validator, ValidationError
from functools import wraps
from flask import request
from utils.errors import ValidationError as AppValidationError

SUPPORTED_PLATFORMS = ('steam', 'epic', 'gog')

# Pasted library exports are large JSON documents for big GOG accounts
MAX_LIBRARY_INPUT_LENGTH = 5_000_000


# ========== Comparison ==========

class CompareRequest(BaseModel):
    """Schema for comparing a storefront library against the catalog"""
    platform: str = Field(..., min_length=1, description="Storefront key: steam, epic or gog")
    library_input: str = Field(
        ...,
        min_length=1,
        max_length=MAX_LIBRARY_INPUT_LENGTH,
        description="Steam ID/profile URL, or the pasted Epic/GOG game list",
    )

    @field_validator('platform')
    @classmethod
    def validate_platform(cls, v):
        v = v.strip().lower()
        if v not in SUPPORTED_PLATFORMS:
            raise ValueError(f'Unsupported platform. Choose one of: {", ".join(SUPPORTED_PLATFORMS)}')
        return v

    @field_validator('library_input')
    @classmethod
    def validate_library_input(cls, v):
        if not v.strip():
            raise ValueError('Library input cannot be empty')
        return v


# ========== Helper Functions ==========

def get_validation_errors(e: Exception) -> List[Dict[str, Any]]:
    """
    Extract validation errors from Pydantic ValidationError.

    Args:
        e: Pydantic ValidationError

    Returns:
        List of error dictionaries with field and message
    """
    if hasattr(e, 'errors'):
        return [
            {
                'field': '.'.join(str(loc) for loc in err['loc']),
                'message': err['msg'],
                'type': err['type']
            }
            for err in e.errors()
        ]
    return [{'message': str(e)}]


def validate_json(schema: type[BaseModel]):
    """
    Decorator to validate JSON request data against a Pydantic schema.

    Usage:
        @route('/endpoint', methods=['POST'])
        @validate_json(CompareRequest)
        def my_endpoint(validated_data: CompareRequest):
            platform = validated_data.platform
            ...

    Args:
        schema: Pydantic model class to validate against

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def wrapper(*args, **kwargs):
            data = request.get_json(silent=True)

            if not isinstance(data, dict):
                raise AppValidationError('No JSON data provided')

            try:
                validated_data = schema(**data)
            except ValidationError as e:
                errors = get_validation_errors(e)
                error_messages = [f"{err['field']}: {err['message']}" for err in errors]
                raise AppValidationError(
                    '; '.join(error_messages),
                    details={'errors': errors}
                )

            return f(validated_data, *args, **kwargs)

        return wrapper
    return decorator
