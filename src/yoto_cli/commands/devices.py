"""
Device commands.

Playback commands go through the REST command endpoint
(``/device-v2/{deviceId}/command/{command}``).
"""

from __future__ import annotations

from typing import Any

from yoto_cli import output
from yoto_cli.container import Container
from yoto_cli.errors import UserInputError
from yoto_cli.result import returns_result

PLAYBACK_COMMANDS = ("play", "pause", "stop", "next", "previous")
MIN_VOLUME = 0
MAX_VOLUME = 100


def build_command_payload(command: str, level: int | None = None) -> dict[str, Any]:
    """Validate ``command`` and return its request body."""
    if command == "volume":
        if level is None or not MIN_VOLUME <= level <= MAX_VOLUME:
            raise UserInputError(f"Volume must be {MIN_VOLUME}-{MAX_VOLUME}, got {level}")
        return {"volume": level}
    if command not in PLAYBACK_COMMANDS:
        raise UserInputError(f"Unknown device command: {command}")
    return {}


@returns_result
async def list_devices(container: Container, as_json: bool = False) -> None:
    devices = await container.api_client().get_devices()

    if as_json:
        output.json([device.model_dump(mode="json", exclude_none=True) for device in devices])
        return

    if not devices:
        output.info("No devices found.")
        return

    output.table(
        ["Name", "Device ID", "Type", "Online"],
        [
            [
                device.name,
                device.device_id,
                device.device_type or "-",
                "yes" if device.online else "no",
            ]
            for device in devices
        ],
    )


@returns_result
async def get_device_status(container: Container, device_id: str, as_json: bool = False) -> None:
    status = await container.api_client().get_device_status(device_id)

    if as_json:
        output.json(status.model_dump(mode="json", exclude_none=True))
        return

    output.info(f"Device: {device_id}")
    output.info(f"Online: {'yes' if status.is_online else 'no'}")
    if status.active_card:
        output.info(f"Active card: {status.active_card}")
    if status.user_volume_percentage is not None:
        output.info(f"Volume: {status.user_volume_percentage:g}%")
    if status.battery_level_percentage is not None:
        charging = " (charging)" if status.is_charging else ""
        output.info(f"Battery: {status.battery_level_percentage:g}%{charging}")
    if status.wifi_strength is not None:
        output.info(f"WiFi strength: {status.wifi_strength}")


@returns_result
async def send_command(
    container: Container,
    device_id: str,
    command: str,
    level: int | None = None,
) -> None:
    payload = build_command_payload(command, level)
    await container.api_client().send_device_command(device_id, command, payload)

    if command == "volume":
        output.success(f"Set volume to {level} on {device_id}")
    else:
        output.success(f"Sent {command} to {device_id}")
