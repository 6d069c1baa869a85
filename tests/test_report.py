import unittest
from dataclasses import FrozenInstanceError

from tests._test_path import SRC  # noqa: F401

from portraitpress.validation.report import RuleResult, ValidationReport
from portraitpress.validation.validator import ValidationResult


class TestValidationReport(unittest.TestCase):
    def test_report_is_frozen(self):
        rr = RuleResult(rule_id="Size", passed=True, message="ok", metrics={"a": 1})
        rep = ValidationReport(passed=True, results=[rr])

        self.assertTrue(rep.passed)
        self.assertEqual(rep.results[0].rule_id, "Size")
        self.assertFalse(rr.informational)

        with self.assertRaises(FrozenInstanceError):
            rep.passed = False  # type: ignore[misc]

        with self.assertRaises(FrozenInstanceError):
            rr.message = "changed"  # type: ignore[misc]

    def test_validation_result_is_frozen(self):
        res = ValidationResult(dimensions_ok=True, background_ok=False, positioning_ok=True, quality_ok=True)
        self.assertFalse(res.passed)
        with self.assertRaises(FrozenInstanceError):
            res.background_ok = True  # type: ignore[misc]
