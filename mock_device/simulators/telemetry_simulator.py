"""
Telemetry simulator - thermal model of a pellet smoker.

Modes:
  idle     - no cook running; grill and probe drift back to ambient
  startup  - first 5 minutes after start_cooking(); igniter lit
  heating  - grill below target - tolerance
  cooking  - grill within +/- tolerance of target
  cooling  - grill above target + tolerance

Transitions:
  idle    + start_cooking()            -> startup
  any     + stop_cooking()             -> idle
  startup/heating/cooking/cooling      -> recomputed on every update_simulation()

All public members share one lock; nothing here does I/O, so every call
holds it only for a handful of arithmetic steps.
"""

import random
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from mock_device.simulators.cooking_scenarios import CookingScenario, DEFAULT, get_scenario


DEFAULT_DEVICE_ID = "test-device-001"
DEFAULT_SESSION_ID = "simulation-session"


def utcnow():
    return datetime.now(timezone.utc)


def _isoformat(value):
    return value.isoformat() if value is not None else None


@dataclass
class Temps:
    grill_temp: float = 0.0
    probe1_temp: float = 0.0
    probe2_temp: float = 0.0
    probe3_temp: float = 0.0
    probe4_temp: float = 0.0

    def to_dict(self):
        return {
            'grillTemp': self.grill_temp,
            'probe1Temp': self.probe1_temp,
            'probe2Temp': self.probe2_temp,
            'probe3Temp': self.probe3_temp,
            'probe4Temp': self.probe4_temp,
        }


@dataclass
class SmokerStatus:
    """Point-in-time status document, shaped like the device's get_status reply."""

    id: str
    ttl: int
    smoker_id: str
    session_id: str | None
    type: str
    auger_on: bool
    blower_on: bool
    igniter_on: bool
    temps: Temps
    fire_healthy: bool
    mode: str
    set_point: int
    mode_time: datetime
    current_time: datetime

    def to_dict(self):
        return {
            'id': self.id,
            'ttl': self.ttl,
            'smokerId': self.smoker_id,
            'sessionId': self.session_id,
            'type': self.type,
            'augerOn': self.auger_on,
            'blowerOn': self.blower_on,
            'igniterOn': self.igniter_on,
            'temps': self.temps.to_dict(),
            'fireHealthy': self.fire_healthy,
            'mode': self.mode,
            'setPoint': self.set_point,
            'modeTime': _isoformat(self.mode_time),
            'currentTime': _isoformat(self.current_time),
        }


@dataclass
class SimulationState:
    grill_temp: float
    probe_temp: float
    target_temperature: int
    cooking_start_time: datetime
    last_update_time: datetime
    scenario: CookingScenario = field(default=DEFAULT)
    mode: str = 'idle'
    igniter_on: bool = False
    auger_on: bool = False
    blower_on: bool = False
    cooking: bool = False


class TelemetrySimulator:
    """
    Thread-safe smoker simulator.

    Parameters:
        device_id  (str)            - reported as smokerId
        session_id (str)            - reported as sessionId while cooking
        rng        (random.Random)  - noise source; seed it for repeatable runs
        clock      (callable)       - returns an aware UTC datetime
    """

    IDLE     = 'idle'
    STARTUP  = 'startup'
    HEATING  = 'heating'
    COOKING  = 'cooking'
    COOLING  = 'cooling'

    TYPE_STATUS    = 'status'
    TYPE_TELEMETRY = 'telemetry'

    TTL_SESSION   = -1
    TTL_TELEMETRY = 259200  # 3 days

    MAX_GRILL_TEMP        = 500.0
    PROBE_GRILL_GAP       = 20.0
    PROBE_RELIEF_MAX      = 10.0
    STARTUP_MODE_MINUTES  = 5
    BLOWER_STARTUP_MINUTES  = 10
    IGNITER_STARTUP_MINUTES = 15
    AUGER_HYSTERESIS      = 10
    BLOWER_THRESHOLD      = 15
    FIRE_HEALTH_MARGIN    = 50
    IDLE_COOLING_FACTOR   = 0.5
    IDLE_PROBE_FACTOR     = 0.3

    def __init__(self, device_id=DEFAULT_DEVICE_ID, session_id=DEFAULT_SESSION_ID,
                 rng=None, clock=None):
        self.device_id = device_id
        self.session_id = session_id
        self._rng = rng or random.Random()
        self._clock = clock or utcnow
        self._lock = threading.Lock()

        now = self._clock()
        self._state = SimulationState(
            grill_temp=DEFAULT.ambient_temperature,
            probe_temp=DEFAULT.ambient_temperature,
            target_temperature=DEFAULT.target_grill_temperature,
            cooking_start_time=now,
            last_update_time=now,
            scenario=DEFAULT,
        )

    # ========== QUERIES ==========

    @property
    def is_cooking(self):
        with self._lock:
            return self._state.cooking

    @property
    def scenario(self):
        with self._lock:
            return self._state.scenario

    def get_current_status(self):
        """Build a fresh SmokerStatus; each call gets its own id and timestamp."""
        with self._lock:
            return self._status_locked()

    def get_snapshot(self):
        """Status plus the running scenario (None when idle), read under one lock."""
        with self._lock:
            return self._status_locked(), (self._state.scenario if self._state.cooking else None)

    def _status_locked(self):
        s = self._state
        return SmokerStatus(
            id=str(uuid.uuid4()),
            ttl=self.TTL_SESSION if s.cooking else self.TTL_TELEMETRY,
            smoker_id=self.device_id,
            session_id=self.session_id if s.cooking else None,
            type=self.TYPE_STATUS if s.cooking else self.TYPE_TELEMETRY,
            auger_on=s.auger_on,
            blower_on=s.blower_on,
            igniter_on=s.igniter_on,
            temps=Temps(
                grill_temp=round(s.grill_temp, 1),
                probe1_temp=round(s.probe_temp, 1),
            ),
            fire_healthy=self._fire_healthy_locked(),
            mode=s.mode,
            set_point=s.target_temperature,
            mode_time=s.cooking_start_time,
            current_time=self._clock(),
        )

    # ========== COMMANDS ==========

    def start_cooking(self, scenario):
        """Start (or restart) a cook. Accepts a CookingScenario or a scenario name."""
        if not isinstance(scenario, CookingScenario):
            scenario = get_scenario(scenario)
        with self._lock:
            now = self._clock()
            s = self._state
            s.scenario = scenario
            s.target_temperature = scenario.target_grill_temperature
            s.cooking_start_time = now
            s.last_update_time = now
            s.cooking = True
            s.mode = self.STARTUP
            s.igniter_on = True
            s.auger_on = True
            s.blower_on = False
        return scenario

    def stop_cooking(self):
        """Return to idle. Temperatures are left to cool on later ticks."""
        with self._lock:
            s = self._state
            s.cooking = False
            s.mode = self.IDLE
            s.igniter_on = False
            s.auger_on = False
            s.blower_on = False

    def set_target_temperature(self, target_temperature):
        """Overwrite the setpoint. Range checks belong to the caller."""
        with self._lock:
            self._state.target_temperature = target_temperature

    # ========== TICK ==========

    def update_simulation(self):
        """Advance the model by the wall-clock time since the previous tick."""
        with self._lock:
            s = self._state
            now = self._clock()
            # a clock stepping backwards must not run the model in reverse
            elapsed_minutes = max(0.0, (now - s.last_update_time).total_seconds() / 60.0)
            s.last_update_time = now

            if not s.cooking:
                self._cool_to_ambient_locked(elapsed_minutes)
                return

            cooking_minutes = (now - s.cooking_start_time).total_seconds() / 60.0

            self._update_grill_temperature_locked(elapsed_minutes)
            self._update_probe_temperature_locked(elapsed_minutes)
            self._update_component_states_locked(cooking_minutes)
            self._update_cooking_mode_locked(cooking_minutes)

    # ========== MODEL (called while holding _lock) ==========

    def _update_grill_temperature_locked(self, elapsed_minutes):
        s = self._state
        scenario = s.scenario
        target = s.target_temperature
        tolerance = scenario.temperature_tolerance
        difference = target - s.grill_temp

        if abs(difference) <= tolerance:
            # steady state noise in [-tol/4, +tol/4]
            s.grill_temp += (self._rng.random() - 0.5) * (tolerance / 2)
        elif difference > 0:
            factor = self._rng.uniform(0.8, 1.2)
            s.grill_temp += scenario.grill_heating_rate * elapsed_minutes * factor
            if s.grill_temp > target + tolerance:
                s.grill_temp = target + self._rng.uniform(0, tolerance)
        else:
            factor = self._rng.uniform(0.8, 1.2)
            s.grill_temp -= scenario.grill_cooling_rate * elapsed_minutes * factor
            if s.grill_temp < target - tolerance:
                s.grill_temp = target - self._rng.uniform(0, tolerance)

        s.grill_temp = min(self.MAX_GRILL_TEMP, max(scenario.ambient_temperature, s.grill_temp))

    def _update_probe_temperature_locked(self, elapsed_minutes):
        s = self._state
        scenario = s.scenario
        candidate = min(s.probe_temp + scenario.meat_heating_rate * elapsed_minutes,
                        scenario.target_probe_temperature)

        ceiling = s.grill_temp - self.PROBE_GRILL_GAP
        if candidate > ceiling:
            # meat never overtakes the pit, but it does not cool here either
            candidate = max(ceiling - self._rng.uniform(0, self.PROBE_RELIEF_MAX), s.probe_temp)

        s.probe_temp = max(scenario.ambient_temperature, candidate)

    def _cool_to_ambient_locked(self, elapsed_minutes):
        s = self._state
        ambient = s.scenario.ambient_temperature
        rate = s.scenario.grill_cooling_rate * self.IDLE_COOLING_FACTOR

        if s.grill_temp > ambient:
            s.grill_temp = max(ambient, s.grill_temp - rate * elapsed_minutes)
        if s.probe_temp > ambient:
            s.probe_temp = max(ambient, s.probe_temp - rate * elapsed_minutes * self.IDLE_PROBE_FACTOR)

    def _update_component_states_locked(self, cooking_minutes):
        s = self._state
        difference = s.target_temperature - s.grill_temp
        in_startup = s.mode == self.STARTUP

        s.igniter_on = in_startup and cooking_minutes < self.IGNITER_STARTUP_MINUTES

        if difference > self.AUGER_HYSTERESIS:
            s.auger_on = True
        elif difference < -self.AUGER_HYSTERESIS:
            s.auger_on = False

        s.blower_on = (difference > self.BLOWER_THRESHOLD
                       or (in_startup and cooking_minutes < self.BLOWER_STARTUP_MINUTES))

    def _update_cooking_mode_locked(self, cooking_minutes):
        s = self._state
        target = s.target_temperature
        tolerance = s.scenario.temperature_tolerance

        if cooking_minutes < self.STARTUP_MODE_MINUTES:
            s.mode = self.STARTUP
        elif abs(target - s.grill_temp) <= tolerance:
            s.mode = self.COOKING
        elif s.grill_temp < target - tolerance:
            s.mode = self.HEATING
        else:
            s.mode = self.COOLING

    def _fire_healthy_locked(self):
        s = self._state
        hot_enough = s.grill_temp >= s.scenario.ambient_temperature + self.FIRE_HEALTH_MARGIN
        if not s.cooking:
            return hot_enough
        return hot_enough and (s.auger_on or s.mode == self.COOKING)
