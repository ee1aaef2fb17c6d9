"""Color value type for final pixel output.

Radiance is accumulated on the Taichi side as unconstrained vec3 values.
Only the averaged per-pixel result is converted into a Color, whose channels
must lie in [0, 1]. Constructing a Color outside that range is a contract
violation and raises immediately rather than being clamped.

Example:
    >>> from src.pathtracer.core.color import Color
    >>> Color(0.5, 0.25, 1.0).write_color()
    '128 64 255'
    >>> Color(0.25, 0.25, 0.25).gamma_corrected()
    Color(red=0.5, green=0.5, blue=0.5)
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

# Maximum integer value of an output channel
MAX_CHANNEL_VALUE = 255


def _scale_channel(value: float) -> int:
    """Scale a [0, 1] channel to [0, 255], rounding halves away from zero."""
    return int(math.floor(value * MAX_CHANNEL_VALUE + 0.5))


@dataclass(frozen=True)
class Color:
    """An RGB color with every channel in [0, 1].

    Attributes:
        red: Red channel in [0, 1].
        green: Green channel in [0, 1].
        blue: Blue channel in [0, 1].

    Raises:
        ValueError: If any channel is outside [0, 1] or NaN.
    """

    red: float
    green: float
    blue: float

    def __post_init__(self) -> None:
        for name in ("red", "green", "blue"):
            value = getattr(self, name)
            # Written so that NaN fails the check as well
            if not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"Color channel {name} = {value} is outside [0, 1]."
                )

    @classmethod
    def from_vector(cls, v: Sequence[float]) -> Color:
        """Convert an averaged accumulator vector into a Color.

        Args:
            v: Three channel values, e.g. a row of a NumPy image or a
                Taichi vector read back into Python.

        Returns:
            The corresponding Color.

        Raises:
            ValueError: If the vector does not have three components or a
                component is outside [0, 1].
        """
        if len(v) != 3:
            raise ValueError(f"Expected 3 channels, got {len(v)}")
        return cls(float(v[0]), float(v[1]), float(v[2]))

    def gamma_corrected(self) -> Color:
        """Apply gamma 2 correction (square root of each channel)."""
        return Color(math.sqrt(self.red), math.sqrt(self.green), math.sqrt(self.blue))

    def to_bytes(self) -> tuple[int, int, int]:
        """Scale the channels to integers in [0, 255]."""
        return (
            _scale_channel(self.red),
            _scale_channel(self.green),
            _scale_channel(self.blue),
        )

    def write_color(self) -> str:
        """Format the color as a PPM pixel line ("r g b")."""
        r, g, b = self.to_bytes()
        return f"{r} {g} {b}"
