"""Cooking scenarios - fixed catalog of BBQ presets driving the simulator"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CookingScenario:
    """
    Temperature and timing characteristics of one cook.

    Rates are degrees F per minute; tolerance is the +/- band around the
    grill target that counts as "at temperature".
    """

    name: str
    target_grill_temperature: int
    target_probe_temperature: int
    estimated_cooking_time_minutes: int
    grill_heating_rate: float
    grill_cooling_rate: float
    meat_heating_rate: float
    temperature_tolerance: float
    ambient_temperature: float = 70.0

    def __post_init__(self):
        for field_name in ('grill_heating_rate', 'grill_cooling_rate', 'meat_heating_rate'):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"{field_name} must be > 0")
        if self.temperature_tolerance <= 0:
            raise ValueError("temperature_tolerance must be > 0")


BRISKET = CookingScenario(
    name="Brisket",
    target_grill_temperature=225,
    target_probe_temperature=203,
    estimated_cooking_time_minutes=720,  # 12 hours
    grill_heating_rate=3.0,
    grill_cooling_rate=2.0,
    meat_heating_rate=0.5,
    temperature_tolerance=15.0,
    ambient_temperature=70.0,
)

PORK_SHOULDER = CookingScenario(
    name="Pork Shoulder",
    target_grill_temperature=250,
    target_probe_temperature=195,
    estimated_cooking_time_minutes=480,  # 8 hours
    grill_heating_rate=3.5,
    grill_cooling_rate=2.5,
    meat_heating_rate=0.7,
    temperature_tolerance=20.0,
    ambient_temperature=70.0,
)

RIBS = CookingScenario(
    name="Ribs",
    target_grill_temperature=275,
    target_probe_temperature=190,
    estimated_cooking_time_minutes=360,  # 6 hours
    grill_heating_rate=4.0,
    grill_cooling_rate=3.0,
    meat_heating_rate=1.0,
    temperature_tolerance=25.0,
    ambient_temperature=70.0,
)

CHICKEN = CookingScenario(
    name="Chicken",
    target_grill_temperature=350,
    target_probe_temperature=165,
    estimated_cooking_time_minutes=90,  # 1.5 hours
    grill_heating_rate=5.0,
    grill_cooling_rate=4.0,
    meat_heating_rate=2.5,
    temperature_tolerance=15.0,
    ambient_temperature=70.0,
)

DEFAULT = CookingScenario(
    name="Default Cook",
    target_grill_temperature=225,
    target_probe_temperature=165,
    estimated_cooking_time_minutes=240,  # 4 hours
    grill_heating_rate=3.0,
    grill_cooling_rate=2.0,
    meat_heating_rate=0.8,
    temperature_tolerance=15.0,
    ambient_temperature=70.0,
)

# lookup key -> preset; anything not listed resolves to DEFAULT
SCENARIOS = {
    'brisket': BRISKET,
    'porkshoulder': PORK_SHOULDER,
    'ribs': RIBS,
    'chicken': CHICKEN,
}


def get_scenario(name):
    """Resolve a scenario by name (case-insensitive). Unknown names give DEFAULT."""
    if not name:
        return DEFAULT
    return SCENARIOS.get(str(name).lower(), DEFAULT)


def list_scenarios():
    """Return (key, scenario) pairs for every preset, default last."""
    return list(SCENARIOS.items()) + [('default', DEFAULT)]
