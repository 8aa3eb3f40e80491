"""MeatGeek mock smoker - telemetry simulator, HTTP API and MQTT relay"""

__version__ = "0.1.0"
