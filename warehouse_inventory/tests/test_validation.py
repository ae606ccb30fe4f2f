"""
Tests for field-level validation helpers.
"""
import unittest
from decimal import Decimal

from warehouse_inventory.exceptions import ValidationError
from warehouse_inventory.utils.validation import (
    is_non_empty,
    is_positive,
    is_non_negative,
    to_price,
    validate_product_fields,
    validate_zone_fields,
    validate_quantity,
    raise_for_errors
)


class TestPredicates(unittest.TestCase):

    def test_is_non_empty(self):
        self.assertTrue(is_non_empty("Widget"))
        self.assertFalse(is_non_empty(""))
        self.assertFalse(is_non_empty("   "))
        self.assertFalse(is_non_empty(None))
        self.assertFalse(is_non_empty(5))

    def test_is_positive(self):
        self.assertTrue(is_positive(1))
        self.assertTrue(is_positive(0.01))
        self.assertTrue(is_positive(Decimal("2.50")))
        self.assertFalse(is_positive(0))
        self.assertFalse(is_positive(-3))
        self.assertFalse(is_positive(None))
        self.assertFalse(is_positive(True))
        self.assertFalse(is_positive("5"))

    def test_is_non_negative(self):
        self.assertTrue(is_non_negative(0))
        self.assertTrue(is_non_negative(7))
        self.assertFalse(is_non_negative(-1))

    def test_to_price(self):
        self.assertEqual(to_price("12.50"), Decimal("12.50"))
        self.assertEqual(to_price(3), Decimal("3"))
        self.assertIsNone(to_price("abc"))
        self.assertIsNone(to_price("NaN"))
        self.assertIsNone(to_price(None))
        self.assertIsNone(to_price(False))


class TestValidators(unittest.TestCase):

    def test_valid_product(self):
        self.assertEqual(validate_product_fields("Widget", "W-1", Decimal("9.99")), {})
        self.assertEqual(validate_product_fields("Widget", "W-1", "9.99"), {})

    def test_invalid_product_reports_every_field(self):
        errors = validate_product_fields("", " ", 0)
        self.assertEqual(set(errors), {'name', 'sku', 'price'})

    def test_partial_product_checks_only_supplied_fields(self):
        self.assertEqual(validate_product_fields(price=5, partial=True), {})
        self.assertEqual(set(validate_product_fields(sku="", partial=True)), {'sku'})
        self.assertEqual(set(validate_product_fields(price=-1, partial=True)), {'price'})

    def test_price_scale(self):
        self.assertEqual(validate_product_fields("Bolt", "B-1", "9.90"), {})
        self.assertEqual(validate_product_fields("Bolt", "B-1", "9.900"), {})
        self.assertEqual(validate_product_fields("Bolt", "B-1", "9999999999.99"), {})
        self.assertIn('price', validate_product_fields("Bolt", "B-1", "0.004"))
        self.assertIn('price', validate_product_fields("Bolt", "B-1", "9.999"))
        self.assertIn('price', validate_product_fields("Bolt", "B-1", "10000000000"))
        self.assertIn('price', validate_product_fields(price="1.005", partial=True))

    def test_zone_fields(self):
        self.assertEqual(validate_zone_fields("Rack B2", 50), {})
        self.assertEqual(set(validate_zone_fields("", 0)), {'name', 'capacity'})
        self.assertEqual(set(validate_zone_fields("Rack", 2.5)), {'capacity'})

    def test_quantity(self):
        self.assertEqual(validate_quantity(3), {})
        self.assertIn('quantity', validate_quantity(0))
        self.assertEqual(validate_quantity(0, allow_zero=True), {})
        self.assertIn('quantity', validate_quantity(-1, allow_zero=True))
        self.assertIn('quantity', validate_quantity(1.5))

    def test_raise_for_errors(self):
        raise_for_errors({}, 'product')

        with self.assertRaises(ValidationError) as ctx:
            raise_for_errors({'name': 'Product name is required'}, 'product')

        self.assertIn('name', str(ctx.exception))
        self.assertEqual(ctx.exception.details, {'name': 'Product name is required'})


if __name__ == '__main__':
    unittest.main()
