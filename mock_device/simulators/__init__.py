from mock_device.simulators.cooking_scenarios import (
    CookingScenario,
    BRISKET,
    PORK_SHOULDER,
    RIBS,
    CHICKEN,
    DEFAULT,
    get_scenario,
    list_scenarios,
)
from mock_device.simulators.telemetry_simulator import SmokerStatus, Temps, TelemetrySimulator
from mock_device.simulators.update_service import SimulationUpdateService

__all__ = [
    'CookingScenario',
    'BRISKET',
    'PORK_SHOULDER',
    'RIBS',
    'CHICKEN',
    'DEFAULT',
    'get_scenario',
    'list_scenarios',
    'SmokerStatus',
    'Temps',
    'TelemetrySimulator',
    'SimulationUpdateService',
]
