from .validation import (
    is_non_empty, is_positive, is_non_negative, to_price,
    validate_product_fields, validate_zone_fields, validate_quantity, raise_for_errors
)

__all__ = [
    'is_non_empty',
    'is_positive',
    'is_non_negative',
    'to_price',
    'validate_product_fields',
    'validate_zone_fields',
    'validate_quantity',
    'raise_for_errors'
]
