from userservice.core.config import settings
from userservice.utils.exceptions import ValidationError


def validate_pagination(offset: int, limit: int) -> None:
    """Reject page windows outside 0 <= offset and 0 < limit <= PAGINATION_MAX_LIMIT"""
    if offset < 0:
        raise ValidationError("Offset cannot be negative")
    if limit <= 0:
        raise ValidationError("Limit must be greater than zero")
    if limit > settings.PAGINATION_MAX_LIMIT:
        raise ValidationError(f"Limit cannot exceed {settings.PAGINATION_MAX_LIMIT}")
