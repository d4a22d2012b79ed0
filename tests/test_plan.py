import unittest

from astrosyo.domain import EquipmentDescriptor, Verdict
from astrosyo.plan import (
    BAD_PLAN,
    LARGE_APERTURE_TIP,
    MIXED_PLAN,
    OK_PLAN,
    SMALL_APERTURE_TIP,
    compose_plan,
)


class TestComposePlan(unittest.TestCase):
    def test_bad_verdict(self):
        self.assertEqual(compose_plan(Verdict.BAD), list(BAD_PLAN))

    def test_mixed_verdict_ignores_equipment(self):
        plan = compose_plan(Verdict.MIXED, EquipmentDescriptor(aperture_mm=300))
        self.assertEqual(plan, list(MIXED_PLAN))

    def test_ok_with_large_aperture(self):
        plan = compose_plan(Verdict.OK, EquipmentDescriptor(aperture_mm=200, type="Dobsonian"))
        self.assertEqual(plan[:2], list(OK_PLAN))
        self.assertEqual(plan[-1], LARGE_APERTURE_TIP)

    def test_ok_threshold_is_inclusive(self):
        plan = compose_plan("ok", EquipmentDescriptor(aperture_mm=150))
        self.assertEqual(plan[-1], LARGE_APERTURE_TIP)

    def test_ok_without_aperture_suggests_easy_targets(self):
        self.assertEqual(compose_plan(Verdict.OK)[-1], SMALL_APERTURE_TIP)
        self.assertEqual(compose_plan(Verdict.OK, EquipmentDescriptor(aperture_mm=70))[-1], SMALL_APERTURE_TIP)

    def test_never_more_than_three_lines(self):
        for verdict in Verdict:
            self.assertLessEqual(len(compose_plan(verdict, EquipmentDescriptor(aperture_mm=250))), 3)

    def test_unknown_verdict_rejected(self):
        with self.assertRaises(ValueError):
            compose_plan("great")


if __name__ == "__main__":
    unittest.main()
