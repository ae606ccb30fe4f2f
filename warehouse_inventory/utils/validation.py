from decimal import Decimal, InvalidOperation
from typing import Dict, Optional, Union

from warehouse_inventory.exceptions import ValidationError

Number = Union[int, float, Decimal]

# Prices are stored as NUMERIC(12, 2)
PRICE_QUANTUM = Decimal('0.01')
MAX_PRICE = Decimal('9999999999.99')

def is_non_empty(value: Optional[str]) -> bool:
    """True if value is a string with at least one non-blank character."""
    return isinstance(value, str) and bool(value.strip())

def _is_number(value) -> bool:
    # bool is an int subclass; True is not a price
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)

def is_positive(value: Optional[Number]) -> bool:
    """True if value is a number strictly greater than zero."""
    if not _is_number(value):
        return False
    try:
        return Decimal(str(value)) > 0
    except InvalidOperation:
        return False

def is_non_negative(value: Optional[Number]) -> bool:
    """True if value is a number greater than or equal to zero."""
    if not _is_number(value):
        return False
    try:
        return Decimal(str(value)) >= 0
    except InvalidOperation:
        return False

def to_price(value) -> Optional[Decimal]:
    """Coerce a price argument to Decimal, or None if it is not numeric."""
    if isinstance(value, bool):
        return None
    try:
        price = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not price.is_finite():
        return None
    return price

def validate_product_fields(
    name: Optional[str] = None,
    sku: Optional[str] = None,
    price=None,
    partial: bool = False
) -> Dict[str, str]:
    """Validate product fields.

    Args:
        name: Product name
        sku: Stock keeping unit
        price: Unit price
        partial: Only check fields that were supplied (for updates)

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not (partial and name is None) and not is_non_empty(name):
        errors['name'] = 'Product name is required'

    if not (partial and sku is None) and not is_non_empty(sku):
        errors['sku'] = 'SKU is required'

    if not (partial and price is None):
        parsed = to_price(price)
        if parsed is None or parsed <= 0:
            errors['price'] = 'Price must be a positive number'
        elif parsed > MAX_PRICE:
            errors['price'] = f'Price must not exceed {MAX_PRICE}'
        elif parsed.quantize(PRICE_QUANTUM) != parsed:
            errors['price'] = 'Price must have at most two decimal places'

    return errors

def validate_zone_fields(name: Optional[str], capacity) -> Dict[str, str]:
    """Validate storage zone fields.

    Args:
        name: Zone name
        capacity: Zone capacity

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    if not is_non_empty(name):
        errors['name'] = 'Zone name is required'

    if not isinstance(capacity, int) or not is_positive(capacity):
        errors['capacity'] = 'Capacity must be a positive integer'

    return errors

def validate_quantity(quantity, allow_zero: bool = False) -> Dict[str, str]:
    """Validate a stock quantity.

    Args:
        quantity: Quantity to check
        allow_zero: Accept zero (counted quantities may be zero)

    Returns:
        Dictionary with validation errors
    """
    errors = {}

    valid = isinstance(quantity, int) and (
        is_non_negative(quantity) if allow_zero else is_positive(quantity)
    )
    if not valid:
        qualifier = 'non-negative' if allow_zero else 'positive'
        errors['quantity'] = f'Quantity must be a {qualifier} integer'

    return errors

def raise_for_errors(errors: Dict[str, str], context: str) -> None:
    """Raise ValidationError when a validator reported problems.

    Args:
        errors: Output of one of the validate_* functions
        context: Operation name used in the message
    """
    if errors:
        summary = '; '.join(f"{field}: {message}" for field, message in errors.items())
        raise ValidationError(f"Invalid {context}: {summary}", details=errors)
