import os
import tempfile
import unittest

from splitbits.utils import *
from splitbits._utils import to_binary, to_hex, final, get_linter_options, get_linter_option


class Log2TestCase(unittest.TestCase):
    def test_ceil_log2(self):
        self.assertEqual(ceil_log2(0), 0)
        self.assertEqual(ceil_log2(1), 0)
        self.assertEqual(ceil_log2(2), 1)
        self.assertEqual(ceil_log2(3), 2)
        self.assertEqual(ceil_log2(8), 3)
        self.assertEqual(ceil_log2(9), 4)
        self.assertEqual(ceil_log2(65), 7)
        with self.assertRaises(TypeError):
            ceil_log2(1.5)
        with self.assertRaisesRegex(ValueError, r"^-1 is negative$"):
            ceil_log2(-1)


class MaskTestCase(unittest.TestCase):
    def test_mask(self):
        self.assertEqual(mask(0), 0)
        self.assertEqual(mask(3), 0b111)
        self.assertEqual(mask(2, 6), 0b1100_0000)
        self.assertEqual(mask(128), (1 << 128) - 1)

    def test_mask_wrong(self):
        with self.assertRaisesRegex(ValueError, r"^Width -1 is negative$"):
            mask(-1)
        with self.assertRaisesRegex(ValueError, r"^Offset -1 is negative$"):
            mask(1, -1)
        with self.assertRaises(TypeError):
            mask(1.5)


class FormatTestCase(unittest.TestCase):
    def test_to_binary(self):
        self.assertEqual(to_binary(5, 4), "0101")
        self.assertEqual(to_binary(0, 0), "")
        with self.assertRaisesRegex(ValueError, r"^16 does not fit in 4 bits$"):
            to_binary(16, 4)

    def test_to_hex(self):
        self.assertEqual(to_hex(0x25, 8), "0x25")
        self.assertEqual(to_hex(1, 7), "0x01")
        self.assertEqual(to_hex(0, 128), "0x" + "0" * 32)
        with self.assertRaisesRegex(ValueError, r"^256 does not fit in 8 bits$"):
            to_hex(256, 8)


class FinalTestCase(unittest.TestCase):
    def test_final(self):
        @final
        class Sealed:
            pass

        with self.assertRaisesRegex(TypeError, r"^Subclassing .+\.Sealed is not supported$"):
            class Derived(Sealed):
                pass


class LinterOptionTestCase(unittest.TestCase):
    def source_file(self, first_line):
        with tempfile.NamedTemporaryFile("w", prefix="splitbits_test_", suffix=".py",
                                         delete=False) as file:
            file.write(first_line)
            file.write("pass\n")
        self.addCleanup(os.unlink, file.name)
        return file.name

    def test_options(self):
        filename = self.source_file("# splitbits: FieldlessTemplate=no, Other=1\n")
        self.assertEqual(get_linter_options(filename),
                         {"FieldlessTemplate": "no", "Other": "1"})
        self.assertEqual(get_linter_option(filename, "FieldlessTemplate", True), False)
        self.assertEqual(get_linter_option(filename, "Other", False), True)
        self.assertEqual(get_linter_option(filename, "Missing", True), True)

    def test_invalid_value(self):
        filename = self.source_file("# splitbits: FieldlessTemplate=maybe\n")
        self.assertEqual(get_linter_option(filename, "FieldlessTemplate", True), True)

    def test_malformed_comment(self):
        filename = self.source_file("# splitbits: FieldlessTemplate no\n")
        self.assertEqual(get_linter_options(filename), {})

    def test_no_options(self):
        filename = self.source_file("import os\n")
        self.assertEqual(get_linter_options(filename), {})
