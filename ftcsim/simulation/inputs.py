"""Per-robot input frames.

The simulation consumes one ``InputFrame`` per robot per tick: three
normalized axes plus the set of held buttons. Edge detection (for ARM)
happens inside the match manager, so hosts simply report what is held.

Adapters for a standard gamepad layout and for keyboard keys are
provided for hosts that poll raw devices.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Sequence

from .physics.kinematics import sanitize_axis


DEADZONE = 0.15


class Button(str, Enum):
    ARM = "arm"
    DISARM = "disarm"
    ACTION = "action"


# Standard-mapping gamepad button indices
GAMEPAD_BUTTONS: dict[int, Button] = {
    4: Button.ARM,          # Left bumper
    0: Button.DISARM,       # A / cross
    2: Button.DISARM,       # X / square
    3: Button.DISARM,       # Y / triangle
    7: Button.ACTION,       # Right trigger
}

KEY_BUTTONS: dict[str, Button] = {
    "r": Button.ACTION,
    " ": Button.ACTION,
    "space": Button.ACTION,
    "1": Button.ARM,
    "l": Button.ARM,
    "x": Button.DISARM,
    "3": Button.DISARM,
}


def apply_deadzone(value: float, deadzone: float = DEADZONE) -> float:
    value = sanitize_axis(value)
    return 0.0 if abs(value) <= deadzone else value


@dataclass(frozen=True)
class InputFrame:
    """Normalized input for one robot for one tick.

    Attributes:
        strafe: -1..1, positive = right
        forward: -1..1, positive = away from the driver
        rotate: -1..1, positive increases heading
        buttons: Buttons held this tick
    """
    strafe: float = 0.0
    forward: float = 0.0
    rotate: float = 0.0
    buttons: frozenset[Button] = field(default_factory=frozenset)

    @classmethod
    def neutral(cls) -> InputFrame:
        return cls()

    def sanitized(self) -> InputFrame:
        """Copy with every axis clamped to [-1, 1] and NaN read as 0."""
        return replace(
            self,
            strafe=sanitize_axis(self.strafe),
            forward=sanitize_axis(self.forward),
            rotate=sanitize_axis(self.rotate),
        )

    def pressed(self, button: Button) -> bool:
        return button in self.buttons

    @property
    def is_neutral(self) -> bool:
        return self.strafe == 0 and self.forward == 0 and self.rotate == 0 and not self.buttons

    @classmethod
    def from_buttons(
        cls,
        strafe: float = 0.0,
        forward: float = 0.0,
        rotate: float = 0.0,
        buttons: Iterable[str | Button] = (),
    ) -> InputFrame:
        """Build a frame from button names such as ``["arm", "action"]``.

        Raises:
            ValueError: If a button name is unknown
        """
        return cls(
            strafe=strafe,
            forward=forward,
            rotate=rotate,
            buttons=frozenset(Button(b) for b in buttons),
        ).sanitized()

    @classmethod
    def from_gamepad(
        cls,
        axes: Sequence[float],
        pressed: Sequence[bool],
        deadzone: float = DEADZONE,
    ) -> InputFrame:
        """Map a standard gamepad snapshot to a frame.

        Left stick X strafes, left stick Y (inverted) drives forward and
        right stick X rotates.
        """
        def axis(i: int) -> float:
            return apply_deadzone(axes[i], deadzone) if i < len(axes) else 0.0

        buttons = frozenset(
            button for index, button in GAMEPAD_BUTTONS.items()
            if index < len(pressed) and pressed[index]
        )
        forward = -axis(1)
        return cls(
            strafe=axis(0),
            forward=forward + 0.0,  # avoid -0.0 from inverting a dead axis
            rotate=axis(2),
            buttons=buttons,
        )

    @classmethod
    def from_keys(cls, keys: Iterable[str]) -> InputFrame:
        """Map held keyboard keys (case-insensitive) to a frame.

        W/S drive, A/D strafe, E/Q rotate.
        """
        held = {k.lower() for k in keys}

        def pair(positive: str, negative: str) -> float:
            return (1.0 if positive in held else 0.0) - (1.0 if negative in held else 0.0)

        buttons = frozenset(KEY_BUTTONS[k] for k in held if k in KEY_BUTTONS)
        return cls(
            strafe=pair("d", "a"),
            forward=pair("w", "s"),
            rotate=pair("e", "q"),
            buttons=buttons,
        )

    def to_dict(self) -> dict:
        return {
            "strafe": self.strafe,
            "forward": self.forward,
            "rotate": self.rotate,
            "buttons": sorted(b.value for b in self.buttons),
        }
