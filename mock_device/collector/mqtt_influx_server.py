import json
from datetime import datetime

import paho.mqtt.client as mqtt
from influxdb_client import InfluxDBClient, Point, WriteOptions

from mock_device.settings import load_settings


MEASUREMENT = "smoker_status"
TTL_SESSION = -1

BOOL_FIELDS = {
    "augerOn": "auger_on",
    "blowerOn": "blower_on",
    "igniterOn": "igniter_on",
    "fireHealthy": "fire_healthy",
}

TEMP_FIELDS = {
    "grillTemp": "grill_temp",
    "probe1Temp": "probe1_temp",
    "probe2Temp": "probe2_temp",
    "probe3Temp": "probe3_temp",
    "probe4Temp": "probe4_temp",
}


def retention_of(document):
    """'session' for permanent (ttl -1) documents, 'telemetry' for the rest."""
    return "session" if document.get("ttl") == TTL_SESSION else "telemetry"


def _documents(data):
    """Yield status documents from a batch envelope, a relay message or a bare document."""
    items = data.get("items") if isinstance(data, dict) else None
    if not isinstance(items, list):
        items = [data]
    for item in items:
        if not isinstance(item, dict):
            continue
        document = item.get("status", item)
        if isinstance(document, dict):
            yield item, document


def _parse_time(value):
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


def build_point(document, message=None):
    """Turn one status document into a Point, or None if it has no usable fields."""
    retention = retention_of(document)
    point = Point(MEASUREMENT)\
        .tag("smoker_id", document.get("smokerId") or "unknown")\
        .tag("type", document.get("type") or "unknown")\
        .tag("mode", document.get("mode") or "unknown")\
        .tag("retention", retention)

    if document.get("sessionId"):
        point.tag("session_id", document["sessionId"])

    has_fields = False
    for key, name in BOOL_FIELDS.items():
        if key in document:
            point.field(name, bool(document[key]))
            has_fields = True

    temps = document.get("temps")
    if isinstance(temps, dict):
        for key, name in TEMP_FIELDS.items():
            value = temps.get(key)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                point.field(name, float(value))
                has_fields = True

    set_point = document.get("setPoint")
    if isinstance(set_point, (int, float)) and not isinstance(set_point, bool):
        point.field("set_point", int(set_point))
        has_fields = True

    sequence_number = message.get("sequenceNumber") if message else None
    if isinstance(sequence_number, int) and not isinstance(sequence_number, bool):
        point.field("sequence_number", sequence_number)

    if not has_fields:
        return None

    ts = _parse_time(document.get("currentTime"))
    if ts is not None:
        point.time(ts)

    return point


def route_points(data, status_bucket="status", telemetry_bucket="telemetry"):
    """Group the Points in an MQTT payload by destination bucket."""
    routed = {}
    for message, document in _documents(data):
        try:
            point = build_point(document, message)
        except (TypeError, ValueError, OverflowError) as exc:
            print(f"[SERVER] Skipping malformed status document: {exc}")
            continue
        if point is None:
            continue
        bucket = status_bucket if retention_of(document) == "session" else telemetry_bucket
        routed.setdefault(bucket, []).append(point)
    return routed


def main():
    all_settings = load_settings()
    mqtt_cfg = all_settings.get("mqtt", {})
    influx_cfg = all_settings.get("influx", {})

    host = mqtt_cfg.get("host", "localhost")
    port = int(mqtt_cfg.get("port", 1883))
    username = mqtt_cfg.get("username")
    password = mqtt_cfg.get("password")
    topic = mqtt_cfg.get("topic", "meatgeek/telemetry")

    url = influx_cfg.get("url", "http://localhost:8086")
    token = influx_cfg.get("token", "")
    org = influx_cfg.get("org", "meatgeek")
    status_bucket = influx_cfg.get("status_bucket", "status")
    telemetry_bucket = influx_cfg.get("telemetry_bucket", "telemetry")

    client = InfluxDBClient(url=url, token=token, org=org)
    write_api = client.write_api(write_options=WriteOptions(batch_size=500, flush_interval=1000))

    def on_connect(client, userdata, flags, reason_code, properties):
        if reason_code.is_failure:
            print(f"[SERVER] MQTT connection failed: {reason_code}")
            return
        print("[SERVER] MQTT connected")
        client.subscribe(topic)

    def on_message(client, userdata, msg):
        try:
            data = json.loads(msg.payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return

        for bucket, points in route_points(data, status_bucket, telemetry_bucket).items():
            write_api.write(bucket=bucket, org=org, record=points)

    mqtt_client = mqtt.Client(mqtt.CallbackAPIVersion.VERSION2)
    if username:
        mqtt_client.username_pw_set(username, password)

    mqtt_client.on_connect = on_connect
    mqtt_client.on_message = on_message

    mqtt_client.connect(host, port, 60)
    print("[SERVER] Listening for smoker telemetry...")
    try:
        mqtt_client.loop_forever()
    except KeyboardInterrupt:
        pass
    finally:
        mqtt_client.disconnect()
        write_api.close()
        client.close()


if __name__ == "__main__":
    main()
