import copy
import json
import os


DEFAULT_SETTINGS = {
    "device": {
        "id": "test-device-001",
        "session_id": "simulation-session",
    },
    "simulation": {
        "update_interval": 5.0,
        "default_scenario": "default",
    },
    "telemetry": {
        "enabled": True,
        "interval": 30,
    },
    "mqtt": {
        "enabled": True,
        "host": "localhost",
        "port": 1883,
        "username": None,
        "password": None,
        "topic": "meatgeek/telemetry",
        "qos": 1,
        "batch_interval": 2.0,
        "max_batch": 50,
    },
    "mqtt_commands": {
        "enabled": True,
        "topic": "meatgeek/commands",
    },
    "webapp": {
        "enabled": True,
        "host": "0.0.0.0",
        "port": 3000,
    },
    "influx": {
        "url": "http://localhost:8086",
        "token": "",
        "org": "meatgeek",
        "status_bucket": "status",
        "telemetry_bucket": "telemetry",
    },
}


def merge_settings(base, override):
    """Recursively overlay override onto a copy of base."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_settings(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(filePath='settings.json'):
    if not os.path.isabs(filePath):
        base_dir = os.path.dirname(os.path.abspath(__file__))
        filePath = os.path.join(base_dir, filePath)
    with open(filePath, 'r') as f:
        settings = json.load(f)
    return merge_settings(DEFAULT_SETTINGS, settings)
