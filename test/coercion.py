"""
Coercion tests (value substring → typed value).

Scope
- Integer grammar, signedness and width bounds.
- Decimal grammar, infinities/NaN, overflow and underflow per precision.
- Text and switch pass-through, switch consts, converters, missing values.
- Extreme inputs: digit runs past the int() limit, exponents past any context.
- Fault context (name, token, value, bounds) and message wording.

Conventions
- Test method names follow CamelCase per project convention.
"""
import unittest
from unittest import TestCase

from declopt import integer, decimal, text, switch, manual
from declopt.coercion import coerce
from declopt.faults import (
    CoercionError,
    InvalidValueError,
    MissingValueError,
    NotANumberError,
    OutOfRangeError,
)


class TestIntegerCoercion(TestCase):

    def setUp(self):
        self.signed = integer("count", "--count=")
        self.byte = integer("count", "--count=", bits=8, signed=False)
        self.tiny = integer("delta", "--delta=", bits=8)

    def testPlainDigits(self):
        self.assertEqual(coerce(self.signed, "42", "--count=42"), 42)

    def testExplicitSigns(self):
        self.assertEqual(coerce(self.signed, "+7", "--count=+7"), 7)
        self.assertEqual(coerce(self.signed, "-7", "--count=-7"), -7)

    def testLeadingZeros(self):
        self.assertEqual(coerce(self.signed, "007", "--count=007"), 7)

    def testMalformedIsNotANumber(self):
        for raw in ("4x", " 4", "4 ", "0x10", "1.0", "1e3", "+", "-", "٣"):
            with self.subTest(raw=raw):
                with self.assertRaises(NotANumberError):
                    coerce(self.signed, raw, "--count=" + raw)

    def testUnsignedRejectsNegatives(self):
        for raw in ("-1", "-0", "-300"):
            with self.subTest(raw=raw):
                with self.assertRaises(OutOfRangeError):
                    coerce(self.byte, raw, "--count=" + raw)

    def testUnsignedEdges(self):
        self.assertEqual(coerce(self.byte, "0", "--count=0"), 0)
        self.assertEqual(coerce(self.byte, "255", "--count=255"), 255)
        with self.assertRaises(OutOfRangeError):
            coerce(self.byte, "256", "--count=256")

    def testSignedEdges(self):
        self.assertEqual(coerce(self.tiny, "-128", "--delta=-128"), -128)
        self.assertEqual(coerce(self.tiny, "127", "--delta=127"), 127)
        with self.assertRaises(OutOfRangeError):
            coerce(self.tiny, "-129", "--delta=-129")
        with self.assertRaises(OutOfRangeError):
            coerce(self.tiny, "128", "--delta=128")

    def testDefaultWidthIs32BitSigned(self):
        self.assertEqual(coerce(self.signed, "2147483647", "--count=2147483647"), 2147483647)
        with self.assertRaises(OutOfRangeError):
            coerce(self.signed, "2147483648", "--count=2147483648")

    def testOutOfRangeContext(self):
        with self.assertRaises(OutOfRangeError) as context:
            coerce(self.byte, "300", "--count=300")
        fault = context.exception
        self.assertEqual(fault.bounds, (0, 255))
        self.assertEqual(fault.name, "count")
        self.assertEqual(fault.token, "--count=300")
        self.assertEqual(fault.options["value"], "300")
        self.assertEqual(fault.options["hint"], "pick a value between 0 and 255")
        self.assertEqual(
            fault.message,
            "option 'count': out of range integer '300' (must be between 0 and 255): --count=300"
        )

    def testNotANumberMessage(self):
        with self.assertRaises(NotANumberError) as context:
            coerce(self.signed, "4x", "--count=4x")
        self.assertEqual(context.exception.message, "option 'count': '4x' is not an integer: --count=4x")

    def testHugeDigitRunsAreOutOfRange(self):
        wide = integer("count", "--count=", bits=64)
        for raw in ("9" * 5000, "-" + "9" * 5000, "+1" + "0" * 4400):
            with self.subTest(digits=len(raw)):
                with self.assertRaises(OutOfRangeError):
                    coerce(wide, raw, "--count=" + raw)

    def testLongZeroPaddingIsAccepted(self):
        raw = "0" * 5000 + "5"
        self.assertEqual(coerce(self.byte, raw, "--count=" + raw), 5)
        self.assertEqual(coerce(self.tiny, "-" + raw, "--delta=-" + raw), -5)

    def testEmptyIsMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            coerce(self.signed, "", "--count=")
        self.assertEqual(context.exception.message, "option 'count': missing integer value: --count=")


class TestDecimalCoercion(TestCase):

    def setUp(self):
        self.double = decimal("ratio", "--ratio=")
        self.single = decimal("ratio", "--ratio=", precision="single")

    def testGrammar(self):
        cases = {
            "1.5": 1.5,
            ".5": 0.5,
            "1.": 1.0,
            "-2": -2.0,
            "+0.25": 0.25,
            "1e3": 1000.0,
            "1E-3": 0.001,
            "0": 0.0,
        }
        for raw, expected in cases.items():
            with self.subTest(raw=raw):
                self.assertEqual(coerce(self.double, raw, "--ratio=" + raw), expected)

    def testMalformedIsNotANumber(self):
        for raw in ("1,5", "abc", "1.5x", "e3", ".", "nan", "NaN", "0x1p3", " 1"):
            with self.subTest(raw=raw):
                with self.assertRaises(NotANumberError):
                    coerce(self.double, raw, "--ratio=" + raw)

    def testInfinityIsOutOfRange(self):
        for raw in ("inf", "-inf", "Infinity", "+INF"):
            with self.subTest(raw=raw):
                with self.assertRaises(OutOfRangeError):
                    coerce(self.double, raw, "--ratio=" + raw)

    def testOverflowIsOutOfRange(self):
        with self.assertRaises(OutOfRangeError):
            coerce(self.double, "1e309", "--ratio=1e309")
        with self.assertRaises(OutOfRangeError):
            coerce(self.double, "-1e309", "--ratio=-1e309")

    def testUnderflowIsOutOfRange(self):
        with self.assertRaises(OutOfRangeError):
            coerce(self.double, "1e-400", "--ratio=1e-400")

    def testSinglePrecisionRange(self):
        self.assertEqual(coerce(self.single, "1e38", "--ratio=1e38"), 1e38)
        with self.assertRaises(OutOfRangeError):
            coerce(self.single, "1e39", "--ratio=1e39")
        with self.assertRaises(OutOfRangeError):
            coerce(self.single, "1e-46", "--ratio=1e-46")
        # representable in double, not in single
        self.assertEqual(coerce(self.double, "1e39", "--ratio=1e39"), 1e39)

    def testExtremeExponentsAreOutOfRange(self):
        for raw in ("1e1000000", "-1e1000000", "1e-1000000", "-2.5E+999999999", "1e99999999999999999999999999"):
            with self.subTest(raw=raw):
                with self.assertRaises(OutOfRangeError):
                    coerce(self.double, raw, "--ratio=" + raw)

    def testZeroWithExtremeExponentIsZero(self):
        for raw in ("0e1000000", "-0.000e-1000000", "0e99999999999999999999999999"):
            with self.subTest(raw=raw):
                self.assertEqual(coerce(self.double, raw, "--ratio=" + raw), 0.0)

    def testNotANumberMessage(self):
        with self.assertRaises(NotANumberError) as context:
            coerce(self.double, "abc", "--ratio=abc")
        self.assertEqual(context.exception.message, "option 'ratio': 'abc' is not a decimal: --ratio=abc")


class TestOtherKinds(TestCase):

    def testTextIsVerbatim(self):
        option = text("name", "--name=")
        self.assertEqual(coerce(option, "abc", "--name=abc"), "abc")
        self.assertEqual(coerce(option, " a = b ", "--name= a = b "), " a = b ")

    def testEmptyTextIsMissingValue(self):
        with self.assertRaises(MissingValueError):
            coerce(text("name", "--name="), "", "--name=")

    def testSwitchYieldsTrue(self):
        self.assertIs(coerce(switch("verbose", "-v"), "", "-v"), True)

    def testSwitchYieldsItsConst(self):
        self.assertIs(coerce(switch("color", "--no-color", const=False), "", "--no-color"), False)
        self.assertEqual(coerce(switch("level", "--debug", const="debug"), "", "--debug"), "debug")

    def testConverterResult(self):
        option = manual("mode", "--mode=", convert=lambda raw: int(raw, 8))
        self.assertEqual(coerce(option, "755", "--mode=755"), 0o755)

    def testConverterRejectionIsInvalidValue(self):
        option = manual("mode", "--mode=", convert=lambda raw: int(raw, 8))
        with self.assertRaises(InvalidValueError) as context:
            coerce(option, "9", "--mode=9")
        fault = context.exception
        self.assertEqual(fault.message, "option 'mode': cannot convert '9': --mode=9")
        self.assertEqual(fault.token, "--mode=9")
        self.assertEqual(fault.options["value"], "9")
        self.assertIn("invalid literal", fault.options["hint"])
        self.assertIsInstance(fault.__cause__, ValueError)

    def testConverterTypeErrorIsInvalidValue(self):
        def convert(raw):
            raise TypeError

        with self.assertRaises(InvalidValueError) as context:
            coerce(manual("thing", "--thing=", convert=convert), "x", "--thing=x")
        self.assertIsNone(context.exception.options["hint"])

    def testConverterOtherErrorsPropagate(self):
        def convert(raw):
            raise LookupError(raw)

        with self.assertRaises(LookupError):
            coerce(manual("thing", "--thing=", convert=convert), "x", "--thing=x")

    def testEmptyConvertedTextIsMissingValue(self):
        with self.assertRaises(MissingValueError) as context:
            coerce(manual("mode", "--mode=", convert=str.upper), "", "--mode=")
        self.assertIn("--mode=S", context.exception.options["hint"])

    def testEveryFaultIsACoercionError(self):
        for fault in (MissingValueError, NotANumberError, OutOfRangeError, InvalidValueError):
            with self.subTest(fault=fault):
                self.assertTrue(issubclass(fault, CoercionError))


if __name__ == '__main__':
    unittest.main()
