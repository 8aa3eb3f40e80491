from datetime import datetime, timedelta, timezone


class FakeClock:
    """Callable clock for the simulator; only moves when advance() is called."""

    def __init__(self, start=None):
        self.now = start or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)
        return self.now


class MidpointRandom:
    """random.Random stand-in: no noise, factors of exactly 1.0, midpoint clamps."""

    def random(self):
        return 0.5

    def uniform(self, a, b):
        return (a + b) / 2.0


def disabled_settings(**overrides):
    settings = {
        "device": {"id": "test-device-001", "session_id": "simulation-session"},
        "simulation": {"update_interval": 5.0, "default_scenario": "default"},
        "telemetry": {"enabled": True, "interval": 30},
        "mqtt": {"enabled": False},
        "mqtt_commands": {"enabled": False},
    }
    settings.update(overrides)
    return settings
