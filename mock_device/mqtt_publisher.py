"""MQTT telemetry publisher - batches relay messages in a child process"""

import json
import time
import queue
import multiprocessing

import paho.mqtt.client as mqtt


STOP_SENTINEL = "__STOP__"
POLL_TIMEOUT = 0.2  # seconds between batch-age checks while the queue is quiet


def build_batch_payload(device_id, items):
    """Wrap queued status documents in the batch envelope the collector reads."""
    return json.dumps({
        "device": device_id,
        "batch": True,
        "items": items,
    })


class TelemetryBatcher:
    """
    Holds relay messages until a batch is due.

    A batch is due once it holds max_batch messages, or once batch_interval
    seconds have passed since the previous batch went out.
    """

    def __init__(self, max_batch=50, batch_interval=2.0, clock=time.monotonic):
        self.max_batch = max(1, int(max_batch))
        self.batch_interval = float(batch_interval)
        self._clock = clock
        self._pending = []
        self._last_sent = clock()

    def __len__(self):
        return len(self._pending)

    def is_due(self):
        if not self._pending:
            return False
        if len(self._pending) >= self.max_batch:
            return True
        return self._clock() - self._last_sent >= self.batch_interval

    def add(self, message):
        """Queue one message; returns the finished batch if this one completed it."""
        self._pending.append(message)
        return self.take() if self.is_due() else []

    def take(self):
        batch, self._pending = self._pending, []
        self._last_sent = self._clock()
        return batch


def _connect(config, device_id):
    host = config.get("host", "localhost")
    port = int(config.get("port", 1883))
    username = config.get("username")

    client = mqtt.Client(
        mqtt.CallbackAPIVersion.VERSION2,
        client_id=f"telemetry-{device_id}",
    )
    if username:
        client.username_pw_set(username, config.get("password"))

    try:
        client.connect(host, port, 60)
    except OSError as exc:
        print(f"[MQTT] Connection to {host}:{port} failed: {exc}", flush=True)
        return None
    client.loop_start()
    return client


def _publisher_process(config, device_info, q, poll_timeout=POLL_TIMEOUT):
    """Child-process body: drain q into batches until STOP_SENTINEL arrives."""
    device_id = device_info.get("id")
    topic = config.get("topic", "meatgeek/telemetry")
    qos = int(config.get("qos", 1))
    batcher = TelemetryBatcher(
        max_batch=config.get("max_batch", 50),
        batch_interval=config.get("batch_interval", 2.0),
    )

    client = _connect(config, device_id)
    if client is None:
        return
    print(f"[MQTT] Publishing telemetry to {topic}", flush=True)

    def publish(batch):
        if batch:
            client.publish(topic, build_batch_payload(device_id, batch), qos=qos)

    try:
        while True:
            try:
                message = q.get(timeout=poll_timeout)
            except queue.Empty:
                if batcher.is_due():
                    publish(batcher.take())
                continue

            if message == STOP_SENTINEL:
                publish(batcher.take())
                break
            publish(batcher.add(message))
    finally:
        client.loop_stop()
        client.disconnect()


class TelemetryPublisher:
    """
    Ships status documents to the MQTT broker from a separate process.
    The relay only ever calls enqueue(); it never blocks on the network.
    """

    def __init__(self, config, device_info, maxsize=1000):
        self.config = config or {}
        self.device_info = device_info or {}
        self.enabled = bool(self.config.get("enabled", True))
        self.dropped = 0
        self._queue = multiprocessing.Queue(maxsize=maxsize) if self.enabled else None
        self._process = None

    def start(self):
        if not self.enabled:
            return
        self._process = multiprocessing.Process(
            target=_publisher_process,
            args=(self.config, self.device_info, self._queue),
            name="telemetry-publisher",
            daemon=True
        )
        self._process.start()

    def enqueue(self, item):
        if not self.enabled:
            return False
        try:
            self._queue.put_nowait(item)
        except queue.Full:
            self.dropped += 1
            print(f"[MQTT] Queue full, dropped telemetry ({self.dropped} so far)", flush=True)
            return False
        return True

    def stop(self):
        if self._process and self._process.is_alive():
            try:
                self._queue.put_nowait(STOP_SENTINEL)
            except queue.Full:
                self._process.terminate()
            self._process.join(timeout=2)
        self._process = None
