"""PIN settings screen actions."""

import logging
from typing import Any

from pingate.constants import DEFAULT_PIN
from pingate.pin_gate import PinGate
from pingate import response

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class PinSettings:
    """Backs the settings toggle, set/change/reset buttons and the clear action."""

    def __init__(self, gate: PinGate):
        self.gate = gate
        self.pin_enabled = False
        self.pin_set = False

    async def load_status(self) -> dict[str, Any]:
        status = await self.gate.get_status()
        self.pin_enabled = status.enabled
        self.pin_set = status.is_set
        return response.ok(data=status.to_dict())

    async def toggle(self, value: bool) -> dict[str, Any]:
        """
        Switch protection on or off.

        Turning on without a stored PIN asks the screen for a new one
        (status "pin_required"). Turning off deletes the PIN.
        """
        if value:
            if not self.pin_set:
                await self.load_status()
            if not self.pin_set:
                return response.success_response({"mode": "set"}, status="pin_required")
            if await self.gate.enable():
                self.pin_enabled = True
                return response.ok("PIN protection enabled", {"enabled": True})
            return response.from_error(self.gate.last_error, "Failed to enable PIN protection")

        if await self.gate.disable():
            self.pin_enabled = False
            self.pin_set = False
            return response.ok("PIN protection disabled", {"enabled": False})
        return response.from_error(self.gate.last_error, "Failed to disable PIN protection")

    async def submit_new_pin(self, pin: str) -> dict[str, Any]:
        if await self.gate.set_pin(pin):
            self.pin_enabled = True
            self.pin_set = True
            return response.ok("PIN set successfully. PIN protection is now enabled.", {"enabled": True})
        return response.from_error(self.gate.last_error, "Failed to set PIN")

    async def change_pin(self, current_pin: str, new_pin: str) -> dict[str, Any]:
        if await self.gate.change_pin(current_pin, new_pin):
            return response.ok("PIN changed successfully")
        if self.gate.last_error is None:
            return response.denied("Current PIN is incorrect")
        return response.from_error(self.gate.last_error, "Failed to change PIN")

    async def reset_pin(self) -> dict[str, Any]:
        if await self.gate.reset_to_default():
            self.pin_enabled = True
            self.pin_set = True
            return response.ok(f"PIN reset to {DEFAULT_PIN}", {"enabled": True})
        return response.from_error(self.gate.last_error, "Failed to reset PIN")

    async def clear_pin_data(self) -> dict[str, Any]:
        if await self.gate.clear_all():
            self.pin_enabled = False
            self.pin_set = False
            return response.ok("PIN data cleared", {"enabled": False})
        return response.from_error(self.gate.last_error, "Failed to clear PIN data")
