import unittest

from splitbits.core import *


class OverflowTestCase(unittest.TestCase):
    def test_cast(self):
        self.assertIs(Overflow.cast(Overflow.PANIC), Overflow.PANIC)
        self.assertIs(Overflow.cast("truncate"), Overflow.TRUNCATE)
        self.assertIs(Overflow.cast("panic"), Overflow.PANIC)
        self.assertIs(Overflow.cast("corrupt"), Overflow.CORRUPT)
        self.assertIs(Overflow.cast("saturate"), Overflow.SATURATE)

    def test_cast_wrong(self):
        with self.assertRaisesRegex(ValueError,
                r"^Overflow policy must be one of 'truncate', 'panic', 'corrupt', or "
                r"'saturate', not 'wrap'$"):
            Overflow.cast("wrap")
        with self.assertRaisesRegex(ValueError, r"not 'TRUNCATE'$"):
            Overflow.cast("TRUNCATE")


class AdaptTestCase(unittest.TestCase):
    def test_fits(self):
        for overflow in Overflow:
            self.assertEqual(adapt(0b101_0101, 7, overflow), 0b101_0101)
            self.assertEqual(adapt(0, 7, overflow), 0)

    def test_truncate(self):
        self.assertEqual(adapt(0b1010_0101, 7), 0b010_0101)
        self.assertEqual(adapt(0b1010_0101, 7, "truncate"), 0b010_0101)
        self.assertEqual(adapt(0x1ff, 8, Overflow.TRUNCATE), 0xff)

    def test_truncate_idempotent(self):
        for value in (0, 1, 0x7f, 0x80, 0xa5, 0x1234):
            once = adapt(value, 7)
            self.assertEqual(adapt(once, 7), once)

    def test_saturate(self):
        self.assertEqual(adapt(0b1010_0101, 7, Overflow.SATURATE), 0b111_1111)
        for value in (0x7f, 0x80, 0xa5, 1 << 200):
            self.assertLessEqual(adapt(value, 7, Overflow.SATURATE), 2 ** 7 - 1)

    def test_corrupt(self):
        self.assertEqual(adapt(0b1010_0101, 7, Overflow.CORRUPT), 0b1010_0101)

    def test_panic(self):
        with self.assertRaisesRegex(FieldOverflowError,
                r"^Field 'a' value 0b10100101 does not fit in its 7-bit slot "
                r"\(maximum 0b1111111\)$") as cm:
            adapt(0b1010_0101, 7, Overflow.PANIC, name="a")
        self.assertIsInstance(cm.exception, OverflowError)
        self.assertEqual(cm.exception.name, "a")
        self.assertEqual(cm.exception.value, 0b1010_0101)
        self.assertEqual(cm.exception.width, 7)

    def test_wrong_value(self):
        with self.assertRaises(TypeError):
            adapt(1.5, 7)
