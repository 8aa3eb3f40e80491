#!/usr/bin/env python3
"""
MeatGeek Mock Smoker

Runs the telemetry simulator as a stand-in for a real pellet smoker:
  - the update service ticks the thermal model every few seconds
  - the HTTP API serves get_status and simulation control (port 3000)
  - the telemetry relay publishes status documents to MQTT
  - the command channel accepts start/stop/set_temp over MQTT

Everything but the simulator itself can be switched off in settings.json.
"""

import argparse

from mock_device.settings import load_settings
from mock_device.controllers import SmokerController
from mock_device.webapp.app import create_app, run_in_background


HELP = """
==================================================
  MEATGEEK MOCK SMOKER
==================================================
  s - Status          h - Help            q - Quit

  COOK:
  1 - Brisket         4 - Chicken
  2 - Pork shoulder   5 - Default cook
  3 - Ribs            x - Stop cooking
  t - Set setpoint    u - Tick now

  TELEMETRY:
  i - Relay interval  n - Set session id
  e - End session
=================================================="""


def run_loop(controller):
    """Interactive command loop; returns when the user quits."""
    print("\n[SYSTEM] Running...  (press 'h' for help)\n")
    print(HELP)

    while True:
        try:
            cmd = input("\n> ").strip().lower()
        except (KeyboardInterrupt, EOFError):
            print("\n\nExiting...")
            return

        if not cmd:
            continue
        elif cmd == 'q':
            print("\nExiting...")
            return
        elif cmd == 'h':
            print(HELP)
        else:
            try:
                result = controller.handle_command(cmd)
                if result is None:
                    print("Unknown command. Press 'h' for help.")
            except Exception as exc:
                print(f"[ERROR] {exc}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="MeatGeek mock smoker")
    parser.add_argument("--settings", default="settings.json", help="settings file")
    parser.add_argument("--scenario", help="start cooking this scenario immediately")
    args = parser.parse_args(argv)

    print("\n" + "=" * 50)
    print("  MEATGEEK - Mock Smoker")
    print("=" * 50 + "\n")

    settings = load_settings(args.settings)
    controller = SmokerController(settings)
    controller.start()

    web_cfg = settings.get("webapp", {})
    if web_cfg.get("enabled", True):
        run_in_background(
            create_app(controller),
            host=web_cfg.get("host", "0.0.0.0"),
            port=int(web_cfg.get("port", 3000)),
        )

    if args.scenario:
        controller.start_cooking(args.scenario)

    try:
        run_loop(controller)
    finally:
        controller.cleanup()
        print("[SYSTEM] Done.")


if __name__ == "__main__":
    main()
