import unittest
import threading
from engine import EGFREngine
from models import PatientInput, EGFRResult, ValidationFailure, DataTypeError
from constants import Sex, CreatinineUnit, FormulaChoice, StageCode
from staging import StageClassifier

class TestEGFREngine(unittest.TestCase):

    def setUp(self):
        """A standard 70 y male adult."""
        self.adult = PatientInput(age=70, sex=Sex.MALE, creatinine=1.0)
        self.child = PatientInput(age=10, sex=Sex.FEMALE, creatinine=0.5, height_cm=120)

    def test_01_adult_path(self):
        res = EGFREngine.compute(self.adult)
        self.assertIsInstance(res, EGFRResult)
        self.assertEqual(res.formula_used, FormulaChoice.ADULT_CKD_EPI_2021)
        self.assertEqual(res.formula_name, "CKD-EPI 2021")
        self.assertEqual(res.value, 81)

    def test_02_child_path(self):
        res = EGFREngine.compute(self.child)
        self.assertEqual(res.formula_used, FormulaChoice.PEDIATRIC_SCHWARTZ_2009)
        self.assertEqual(res.formula_name, "Bedside Schwartz 2009")
        self.assertEqual(res.value, 99)
        self.assertEqual(res.stage.code, StageCode.G1)

    def test_03_stage_follows_value(self):
        for patient in (self.adult, self.child):
            res = EGFREngine.compute(patient)
            self.assertEqual(res.stage, StageClassifier.classify(res.value))

    def test_04_umol_equivalent(self):
        """88.4 µmol/L is exactly 1.0 mg/dL."""
        si = PatientInput(age=70, sex=Sex.MALE, creatinine=88.4, creatinine_unit=CreatinineUnit.UMOL_L)
        self.assertEqual(EGFREngine.compute(si).value, EGFREngine.compute(self.adult).value)

    def test_05_reports_every_failure(self):
        bad = PatientInput(age=0.5, sex=Sex.MALE, creatinine=25, height_cm=10)
        res = EGFREngine.compute(bad)
        self.assertIsInstance(res, ValidationFailure)
        self.assertFalse(res.success)
        self.assertEqual(set(res.errors), {"age", "creatinine", "height"})

    def test_06_implausible_age_blocks(self):
        res = EGFREngine.compute(PatientInput(age=150, sex=Sex.FEMALE, creatinine=1.0))
        self.assertIsInstance(res, ValidationFailure)
        self.assertEqual(res.errors, {"age": "Please verify age > 120 years"})

    def test_07_adult_height_ignored(self):
        tall = PatientInput(age=40, sex=Sex.MALE, creatinine=1.0, height_cm=999)
        self.assertIsInstance(EGFREngine.compute(tall), EGFRResult)

    def test_08_child_needs_height(self):
        res = EGFREngine.compute(PatientInput(age=12, sex=Sex.MALE, creatinine=0.6))
        self.assertEqual(res.errors, {"height": "Height must be between 30-250 cm"})

    def test_09_deterministic(self):
        self.assertEqual(EGFREngine.compute(self.adult), EGFREngine.compute(self.adult))
        self.assertEqual(EGFREngine.compute(self.child), EGFREngine.compute(self.child))

    def test_10_concurrent_callers(self):
        expected = EGFREngine.compute(self.adult)
        results = []

        def worker():
            for _ in range(50):
                results.append(EGFREngine.compute(self.adult))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(len(results), 400)
        self.assertTrue(all(r == expected for r in results))

    def test_11_summary(self):
        text = EGFREngine.build_summary(EGFREngine.compute(self.adult))
        self.assertIn("eGFR 81", text)
        self.assertIn("CKD-EPI 2021", text)
        self.assertIn("Stage G2: Mildly decreased", text)
        self.assertIn("Risk: Low", text)
        self.assertIn(">3 months", text)

    def test_13_tiny_creatinine_never_raises(self):
        """[EDGE] Creatinine just above 0 passes validation; compute must still answer"""
        child = EGFREngine.compute(PatientInput(age=10, sex=Sex.MALE, creatinine=1e-30, height_cm=120))
        self.assertIsInstance(child, EGFRResult)
        self.assertEqual(child.stage.code, StageCode.G1)

        adult = EGFREngine.compute(PatientInput(age=40, sex=Sex.MALE, creatinine=1e-100))
        self.assertIsInstance(adult, EGFRResult)
        self.assertGreater(adult.value, 10 ** 28)
        self.assertEqual(adult.stage.code, StageCode.G1)

    def test_14_overflowing_egfr_is_a_creatinine_failure(self):
        res = EGFREngine.compute(PatientInput(age=10, sex=Sex.FEMALE, creatinine=1e-310, height_cm=120))
        self.assertIsInstance(res, ValidationFailure)
        self.assertEqual(res.errors, {"creatinine": "Creatinine is too low to calculate eGFR"})

    def test_12_to_dict(self):
        payload = EGFREngine.compute(self.child).to_dict()
        self.assertEqual(payload["egfr"], 99)
        self.assertEqual(payload["formula"], "bedside_schwartz_2009")
        self.assertEqual(payload["stage"], "G1")
        self.assertEqual(payload["risk_tier"], "Low")
        self.assertEqual(payload["color_token"], "bg-green-500")

class TestPatientInput(unittest.TestCase):

    def test_01_immutable(self):
        patient = PatientInput(age=30, sex=Sex.FEMALE, creatinine=0.8)
        with self.assertRaises(Exception):
            patient.age = 31

    def test_02_string_enums_coerced(self):
        patient = PatientInput(age=30, sex="F", creatinine=70, creatinine_unit="umol/L")
        self.assertEqual(patient.sex, Sex.FEMALE)
        self.assertEqual(patient.creatinine_unit, CreatinineUnit.UMOL_L)

    def test_03_type_safety(self):
        with self.assertRaises(DataTypeError):
            PatientInput(age="30", sex=Sex.MALE, creatinine=1.0)
        with self.assertRaises(DataTypeError):
            PatientInput(age=30, sex=Sex.MALE, creatinine=True)
        with self.assertRaises(ValueError):
            PatientInput(age=30, sex="other", creatinine=1.0)

class TestCalculateFromForm(unittest.TestCase):

    def test_01_raw_strings(self):
        res = EGFREngine.calculate_from_form({
            "age": " 70 ", "sex": "male", "creatinine": "1.0", "creatinine_unit": "mg/dL", "height": ""
        })
        self.assertIsInstance(res, EGFRResult)
        self.assertEqual(res.value, 81)

    def test_02_default_unit(self):
        res = EGFREngine.calculate_from_form({"age": "10", "sex": "female", "creatinine": "0.5", "height": "120"})
        self.assertEqual(res.value, 99)

    def test_03_missing_fields(self):
        res = EGFREngine.calculate_from_form({})
        self.assertEqual(res.errors, {
            "age": "Age is required",
            "sex": "Sex is required",
            "creatinine": "Creatinine is required",
        })

    def test_04_parse_and_range_errors_merged(self):
        res = EGFREngine.calculate_from_form({
            "age": "abc", "sex": "female", "creatinine": "25", "creatinine_unit": "mg/dL"
        })
        self.assertEqual(res.errors, {
            "age": "Age must be a number",
            "creatinine": "Please verify creatinine > 20 mg/dL",
        })

    def test_05_child_height_required(self):
        res = EGFREngine.calculate_from_form({"age": "8", "sex": "male", "creatinine": "0.4"})
        self.assertEqual(res.errors, {"height": "Height is required"})

    def test_06_adult_height_garbage_ignored(self):
        res = EGFREngine.calculate_from_form({"age": "30", "sex": "male", "creatinine": "0.9", "height": "tall"})
        self.assertIsInstance(res, EGFRResult)

    def test_07_bad_unit_and_sex(self):
        res = EGFREngine.calculate_from_form({
            "age": "30", "sex": "x", "creatinine": "1", "creatinine_unit": "mmol/L"
        })
        self.assertEqual(set(res.errors), {"sex", "creatinine_unit"})

    def test_08_non_finite_rejected(self):
        res = EGFREngine.calculate_from_form({"age": "nan", "sex": "male", "creatinine": "inf"})
        self.assertEqual(res.errors["age"], "Age must be a number")
        self.assertEqual(res.errors["creatinine"], "Creatinine must be a number")

    def test_10_extreme_creatinine_never_raises(self):
        res = EGFREngine.calculate_from_form({"age": "10", "sex": "male", "creatinine": "1e-310", "height": "120"})
        self.assertIsInstance(res, ValidationFailure)
        self.assertEqual(set(res.errors), {"creatinine"})

        res = EGFREngine.calculate_from_form({"age": "40", "sex": "male", "creatinine": "1e-100"})
        self.assertIsInstance(res, EGFRResult)

    def test_09_numbers_accepted(self):
        res = EGFREngine.calculate_from_form({"age": 70, "sex": "M", "creatinine": 88.4, "creatinine_unit": "µmol/L"})
        self.assertEqual(res.value, 81)

if __name__ == '__main__':
    unittest.main()
