import dataclasses
import unittest

from mock_device.simulators.cooking_scenarios import (
    BRISKET,
    CHICKEN,
    DEFAULT,
    PORK_SHOULDER,
    RIBS,
    CookingScenario,
    get_scenario,
    list_scenarios,
)


CATALOG = [
    # scenario, grill, probe, heat, cool, meat, tolerance, ambient
    (BRISKET, 225, 203, 3.0, 2.0, 0.5, 15.0, 70.0),
    (PORK_SHOULDER, 250, 195, 3.5, 2.5, 0.7, 20.0, 70.0),
    (RIBS, 275, 190, 4.0, 3.0, 1.0, 25.0, 70.0),
    (CHICKEN, 350, 165, 5.0, 4.0, 2.5, 15.0, 70.0),
    (DEFAULT, 225, 165, 3.0, 2.0, 0.8, 15.0, 70.0),
]


class TestCatalog(unittest.TestCase):
    def test_presets_match_catalog(self):
        for scenario, grill, probe, heat, cool, meat, tol, ambient in CATALOG:
            with self.subTest(scenario=scenario.name):
                self.assertEqual(scenario.target_grill_temperature, grill)
                self.assertEqual(scenario.target_probe_temperature, probe)
                self.assertEqual(scenario.grill_heating_rate, heat)
                self.assertEqual(scenario.grill_cooling_rate, cool)
                self.assertEqual(scenario.meat_heating_rate, meat)
                self.assertEqual(scenario.temperature_tolerance, tol)
                self.assertEqual(scenario.ambient_temperature, ambient)

    def test_estimated_cook_times(self):
        self.assertEqual(BRISKET.estimated_cooking_time_minutes, 720)
        self.assertEqual(CHICKEN.estimated_cooking_time_minutes, 90)
        self.assertEqual(DEFAULT.name, "Default Cook")

    def test_presets_are_immutable(self):
        with self.assertRaises(dataclasses.FrozenInstanceError):
            BRISKET.target_grill_temperature = 300

    def test_non_positive_rates_rejected(self):
        with self.assertRaises(ValueError):
            CookingScenario("Bad", 225, 165, 60, 0.0, 2.0, 0.5, 15.0)
        with self.assertRaises(ValueError):
            CookingScenario("Bad", 225, 165, 60, 3.0, 2.0, 0.5, -1.0)


class TestLookup(unittest.TestCase):
    def test_lookup_is_case_insensitive(self):
        self.assertIs(get_scenario("brisket"), BRISKET)
        self.assertIs(get_scenario("BRISKET"), BRISKET)
        self.assertIs(get_scenario("PorkShoulder"), PORK_SHOULDER)
        self.assertIs(get_scenario("Ribs"), RIBS)
        self.assertIs(get_scenario("chicken"), CHICKEN)

    def test_unknown_names_fall_back_to_default(self):
        for name in ("default", "turkey", "pork shoulder", "", None):
            with self.subTest(name=name):
                self.assertIs(get_scenario(name), DEFAULT)

    def test_list_scenarios_ends_with_default(self):
        keys = [key for key, _ in list_scenarios()]
        self.assertEqual(keys, ["brisket", "porkshoulder", "ribs", "chicken", "default"])


if __name__ == "__main__":
    unittest.main()
