"""
Input validation shared by the loyalty services.
"""
from .exceptions import ValidationError

# Range of the ledger's points columns
MAX_POINTS = 2147483647


def validate_points(value, field='points', allow_negative=False):
    """
    Validate a points amount.

    Args:
        value: Points amount, must be an ``int`` (``bool`` is rejected)
        field: Field name reported in the error
        allow_negative: Accept negative (but never zero) amounts

    Raises:
        ValidationError: If the amount is not an integer or out of range

    Returns:
        int: Validated points amount
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("Points must be a whole number.", field=field)

    if allow_negative:
        if value == 0:
            raise ValidationError("Points adjustment cannot be zero.", field=field)
    elif value <= 0:
        raise ValidationError("Points amount must be greater than 0.", field=field)

    if abs(value) > MAX_POINTS:
        raise ValidationError(f"Points amount must be at most {MAX_POINTS}.", field=field)

    return value


def validate_description(value, field='description'):
    """Validate and normalise a ledger entry description."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("A description is required.", field=field)
    description = value.strip()
    if len(description) > 255:
        raise ValidationError("Description must be at most 255 characters.", field=field)
    return description
