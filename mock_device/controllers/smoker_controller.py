"""Smoker Controller - simulator, update service, telemetry relay and command channel"""

import json
import threading
import traceback
import uuid

import paho.mqtt.client as mqtt

from mock_device.mqtt_publisher import TelemetryPublisher
from mock_device.simulators import (
    SimulationUpdateService,
    TelemetrySimulator,
    get_scenario,
)


SCENARIO_KEYS = {
    '1': 'brisket',
    '2': 'porkshoulder',
    '3': 'ribs',
    '4': 'chicken',
    '5': 'default',
}


def parse_int(value, name):
    """int() for user input; bools and floats with a fraction are rejected."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"'{name}' must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"'{name}' must be an integer")
        return int(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise ValueError(f"'{name}' must be an integer") from None


class SmokerController:
    """
    Controller for the mock smoker.

    - Owns the TelemetrySimulator and the SimulationUpdateService ticking it.
    - Relays a status document to MQTT every telemetry interval (1-60s),
      optionally tagging it with a session id pushed from the cloud side.
    - Listens for JSON commands on the MQTT command topic.
    """

    MIN_TELEMETRY_INTERVAL = 1
    MAX_TELEMETRY_INTERVAL = 60

    def __init__(self, settings, mqtt_cfg=None, simulator=None):
        self.settings = settings
        self.device_info = settings.get("device", {})
        self.device_id = self.device_info.get("id", "test-device-001")
        sim_cfg = settings.get("simulation", {})
        telemetry_cfg = settings.get("telemetry", {})
        mqtt_cmd_cfg = settings.get("mqtt_commands", {})

        self.default_scenario = sim_cfg.get("default_scenario", "default")
        self.simulator = simulator or TelemetrySimulator(
            device_id=self.device_id,
            session_id=self.device_info.get("session_id", "simulation-session"),
        )
        self.update_service = SimulationUpdateService(
            self.simulator,
            interval=float(sim_cfg.get("update_interval", SimulationUpdateService.DEFAULT_INTERVAL)),
        )

        if mqtt_cfg is None:
            mqtt_cfg = settings.get("mqtt", {})
        self.mqtt_cfg = mqtt_cfg
        self.publisher = TelemetryPublisher(mqtt_cfg, self.device_info)

        self._relay_lock = threading.Lock()
        self._relay_enabled = bool(telemetry_cfg.get("enabled", True))
        self._telemetry_interval = self._validate_interval(telemetry_cfg.get("interval", 30))
        self._relay_session_id = None
        self._sequence_number = 0
        self.last_telemetry = None
        self._relay_stop = threading.Event()
        self._relay_thread = None

        self._mqtt_cmd_enabled = mqtt_cmd_cfg.get("enabled", True) and mqtt_cfg.get("enabled", True)
        self._mqtt_cmd_topic = mqtt_cmd_cfg.get("topic", "meatgeek/commands")
        self._mqtt_cmd_client = None

        self.running = False

    # ========== SIMULATION COMMANDS ==========

    def start_cooking(self, scenario_name=None):
        scenario = get_scenario(scenario_name or self.default_scenario)
        self.simulator.start_cooking(scenario)
        print(f"[SIM] Cooking started: {scenario.name} (target {scenario.target_grill_temperature}F)", flush=True)
        return scenario

    def stop_cooking(self):
        self.simulator.stop_cooking()
        print("[SIM] Cooking stopped", flush=True)

    def set_target_temperature(self, value):
        temperature = parse_int(value, "temperature")
        self.simulator.set_target_temperature(temperature)
        print(f"[SIM] Setpoint -> {temperature}F", flush=True)
        return temperature

    # ========== TELEMETRY RELAY ==========

    def _validate_interval(self, value):
        seconds = parse_int(value, "interval")
        if not self.MIN_TELEMETRY_INTERVAL <= seconds <= self.MAX_TELEMETRY_INTERVAL:
            raise ValueError(
                f"interval must be between {self.MIN_TELEMETRY_INTERVAL} "
                f"and {self.MAX_TELEMETRY_INTERVAL} seconds"
            )
        return seconds

    @property
    def telemetry_interval(self):
        with self._relay_lock:
            return self._telemetry_interval

    @property
    def relay_session_id(self):
        with self._relay_lock:
            return self._relay_session_id

    def set_telemetry_interval(self, value):
        seconds = self._validate_interval(value)
        with self._relay_lock:
            self._telemetry_interval = seconds
        print(f"[RELAY] Telemetry interval set to {seconds} seconds", flush=True)
        return seconds

    def set_session_id(self, value):
        session_id = str(value or "").replace('"', '').strip()
        if not session_id:
            raise ValueError("session id is required")
        with self._relay_lock:
            self._relay_session_id = session_id
        print(f"[RELAY] SessionID set to {session_id}", flush=True)
        return session_id

    def end_session(self):
        with self._relay_lock:
            self._relay_session_id = None
        print("[RELAY] Session ended", flush=True)

    def build_telemetry(self):
        """Snapshot the simulator and wrap it for the telemetry topic."""
        document = self.simulator.get_current_status().to_dict()
        # type and ttl pass through as the simulator set them, so idle telemetry keeps its 3-day retention
        document["smokerId"] = self.device_id
        with self._relay_lock:
            if self._relay_session_id:
                document["sessionId"] = self._relay_session_id
            self._sequence_number += 1
            sequence_number = self._sequence_number
        return {
            "correlationId": str(uuid.uuid4()),
            "sequenceNumber": sequence_number,
            "status": document,
        }

    def relay_once(self):
        """Build and enqueue one telemetry message. Returns False on failure."""
        try:
            message = self.build_telemetry()
            self.publisher.enqueue(message)
        except Exception as exc:
            print(f"[RELAY] Error sending telemetry: {exc}", flush=True)
            traceback.print_exc()
            return False
        self.last_telemetry = message
        return True

    def _relay_loop(self):
        while not self._relay_stop.is_set():
            self.relay_once()
            self._relay_stop.wait(self.telemetry_interval)

    # ========== MQTT COMMANDS ==========

    def dispatch_command(self, payload):
        """
        Apply one command document. Returns True when it was applied.
        Commands addressed to another device are ignored.
        """
        if not isinstance(payload, dict):
            return False
        target = payload.get("device")
        if target is not None and target != self.device_id:
            return False

        command = payload.get("command")
        try:
            if command == "start":
                self.start_cooking(payload.get("scenario"))
            elif command == "stop":
                self.stop_cooking()
            elif command == "set_temp":
                self.set_target_temperature(payload.get("temperature"))
            elif command == "set_telemetry_interval":
                self.set_telemetry_interval(payload.get("seconds"))
            elif command == "set_session_id":
                self.set_session_id(payload.get("session_id"))
            elif command == "end_session":
                self.end_session()
            else:
                print(f"[CMD] Unknown command: {command}", flush=True)
                return False
        except ValueError as exc:
            print(f"[CMD] Rejected {command}: {exc}", flush=True)
            return False
        return True

    def _on_command_connect(self, client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            print(f"[CMD] MQTT connection refused: {reason_code}", flush=True)
            return
        client.subscribe(self._mqtt_cmd_topic)
        print(f"[CMD] Listening on {self._mqtt_cmd_topic}", flush=True)

    def _on_command_message(self, client, userdata, msg):
        try:
            payload = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            print("[CMD] Ignoring malformed command payload", flush=True)
            return
        self.dispatch_command(payload)

    def _start_mqtt_commands(self):
        if not self._mqtt_cmd_enabled:
            return

        host = self.mqtt_cfg.get("host", "localhost")
        port = int(self.mqtt_cfg.get("port", 1883))
        username = self.mqtt_cfg.get("username")
        password = self.mqtt_cfg.get("password")

        client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=f"commands-{self.device_id}",
        )
        if username:
            client.username_pw_set(username, password)
        client.on_connect = self._on_command_connect
        client.on_message = self._on_command_message
        try:
            client.connect(host, port, 60)
        except OSError as exc:
            print(f"[CMD] MQTT unavailable at {host}:{port} ({exc}) - command channel inactive", flush=True)
            return
        client.loop_start()
        self._mqtt_cmd_client = client

    # ========== LIFECYCLE ==========

    def start(self):
        self.running = True
        self.update_service.start()

        if self._relay_enabled and self.publisher.enabled:
            self.publisher.start()
            self._relay_stop.clear()
            self._relay_thread = threading.Thread(target=self._relay_loop, name="telemetry-relay", daemon=True)
            self._relay_thread.start()

        self._start_mqtt_commands()

    def stop(self):
        self.running = False
        self._relay_stop.set()
        if self._relay_thread:
            self._relay_thread.join(timeout=1)
            self._relay_thread = None

        self.update_service.stop()
        self.publisher.stop()

        if self._mqtt_cmd_client:
            self._mqtt_cmd_client.loop_stop()
            self._mqtt_cmd_client.disconnect()
            self._mqtt_cmd_client = None

    def cleanup(self):
        self.stop()

    # ========== STATUS (CLI) ==========

    def get_status(self):
        status, scenario = self.simulator.get_snapshot()
        return {
            "MODE": status.mode,
            "SCENARIO": scenario.name if scenario else "-",
            "SETPOINT": status.set_point,
            "GRILL": status.temps.grill_temp,
            "PROBE1": status.temps.probe1_temp,
            "AUGER": "ON" if status.auger_on else "OFF",
            "BLOWER": "ON" if status.blower_on else "OFF",
            "IGNITER": "ON" if status.igniter_on else "OFF",
            "FIRE": "HEALTHY" if status.fire_healthy else "CHECK",
            "SESSION": self.relay_session_id or status.session_id or "-",
            "INTERVAL": self.telemetry_interval,
        }

    def show_status(self):
        print("\n" + "=" * 40)
        print(f"SMOKER STATUS ({self.device_id})")
        print("=" * 40)
        status = self.get_status()
        print(f"  [MODE]    {status['MODE']}  ({status['SCENARIO']})")
        print(f"  [SET]     {status['SETPOINT']}F")
        print(f"  [GRILL]   {status['GRILL']:.1f}F")
        print(f"  [PROBE1]  {status['PROBE1']:.1f}F")
        print(f"  [AUGER]   {status['AUGER']}")
        print(f"  [BLOWER]  {status['BLOWER']}")
        print(f"  [IGNITER] {status['IGNITER']}")
        print(f"  [FIRE]    {status['FIRE']}")
        print(f"  [SESSION] {status['SESSION']}")
        print(f"  [RELAY]   every {status['INTERVAL']}s")
        print("=" * 40)

    # ========== COMMANDS ==========

    def handle_command(self, cmd):
        if cmd == 's':
            self.show_status()

        elif cmd in SCENARIO_KEYS:
            self.start_cooking(SCENARIO_KEYS[cmd])
        elif cmd == 'x':
            self.stop_cooking()
        elif cmd == 'u':
            self.update_service.run_once()
            print("[SIM] Manual tick")
        elif cmd == 't':
            try:
                self.set_target_temperature(input("Setpoint (F): "))
            except ValueError as exc:
                print(f"Invalid setpoint: {exc}")
        elif cmd == 'i':
            try:
                self.set_telemetry_interval(input("Telemetry interval (1-60s): "))
            except ValueError as exc:
                print(f"Invalid interval: {exc}")
        elif cmd == 'n':
            try:
                self.set_session_id(input("Session id: "))
            except ValueError as exc:
                print(f"Invalid session id: {exc}")
        elif cmd == 'e':
            self.end_session()
        else:
            return None

        return True
