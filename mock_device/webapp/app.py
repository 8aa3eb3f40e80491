"""HTTP API for the mock smoker - device status plus simulation control."""

import threading
from datetime import datetime, timezone

from flask import Flask, jsonify, request

from mock_device.simulators import list_scenarios


def _param(name):
    """Read a parameter from the query string, falling back to a JSON body."""
    if name in request.args:
        return request.args.get(name)
    payload = request.get_json(silent=True)
    if isinstance(payload, dict):
        return payload.get(name)
    return None


def _bad_request(message):
    return jsonify({"error": message}), 400


def create_app(controller):
    app = Flask(__name__)
    simulator = controller.simulator

    @app.route("/health")
    def health():
        return jsonify({
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        })

    @app.route("/api/robots/MeatGeekBot/commands/get_status")
    def get_status():
        return jsonify({"result": simulator.get_current_status().to_dict()})

    @app.route("/api/status")
    def api_status():
        return jsonify(simulator.get_current_status().to_dict())

    @app.route("/api/simulation/scenarios")
    def api_scenarios():
        return jsonify([
            {
                "key": key,
                "name": scenario.name,
                "targetGrillTemp": scenario.target_grill_temperature,
                "targetProbeTemp": scenario.target_probe_temperature,
                "estimatedMinutes": scenario.estimated_cooking_time_minutes,
            }
            for key, scenario in list_scenarios()
        ])

    @app.route("/api/simulation/start", methods=["POST"])
    def api_start():
        scenario = controller.start_cooking(_param("scenario") or "default")
        return jsonify({
            "status": "started",
            "scenario": scenario.name,
            "targetTemp": scenario.target_grill_temperature,
        })

    @app.route("/api/simulation/stop", methods=["POST"])
    def api_stop():
        controller.stop_cooking()
        return jsonify({"status": "stopped"})

    @app.route("/api/simulation/settemp", methods=["POST"])
    def api_settemp():
        try:
            temperature = controller.set_target_temperature(_param("temperature"))
        except ValueError as exc:
            return _bad_request(str(exc))
        return jsonify({"status": "temperature set", "targetTemperature": temperature})

    @app.route("/api/telemetry/interval", methods=["POST"])
    def api_interval():
        try:
            seconds = controller.set_telemetry_interval(_param("seconds"))
        except ValueError as exc:
            return _bad_request(str(exc))
        return jsonify({"status": "interval set", "seconds": seconds})

    @app.route("/api/telemetry/session", methods=["POST"])
    def api_session_set():
        try:
            session_id = controller.set_session_id(_param("sessionId"))
        except ValueError as exc:
            return _bad_request(str(exc))
        return jsonify({"status": "session set", "sessionId": session_id})

    @app.route("/api/telemetry/session", methods=["DELETE"])
    def api_session_end():
        controller.end_session()
        return jsonify({"status": "session ended"})

    return app


def run_in_background(app, host="0.0.0.0", port=3000):
    """Serve the app from a daemon thread so the CLI loop keeps the foreground."""
    thread = threading.Thread(
        target=app.run,
        kwargs={"host": host, "port": port, "debug": False, "use_reloader": False},
        name="webapp",
        daemon=True,
    )
    thread.start()
    print(f"[WEB] Serving on http://{host}:{port}", flush=True)
    return thread
