from typing import Optional
from enum import IntEnum
import numpy as np


class AnimationType(IntEnum):
    """How an importer applies the animation (or a single bone's track)"""
    ABSOLUTE = 0   # Translations are set to this exact value each frame
    ADDITIVE = 1   # Applied on top of existing animation data
    RELATIVE = 2   # Based on the rest position (frame 0)
    DELTA = 3      # Relative, whole-model movement on the delta bone


class Keyframe:
    """Keyframe class for storing frame-value pairs"""

    def __init__(self, frame: int, value: Optional[np.ndarray] = None):
        """
        Initialize keyframe

        Args:
            frame: Frame index (non-negative)
            value: Vector (x, y, z), quaternion (x, y, z, w), or None for notifications
        """
        self.frame = frame
        self.value = value

    def __eq__(self, other) -> bool:
        if not isinstance(other, Keyframe):
            return NotImplemented
        if self.frame != other.frame:
            return False
        if self.value is None or other.value is None:
            return self.value is None and other.value is None
        return bool(np.array_equal(self.value, other.value))

    def __repr__(self) -> str:
        return f"Keyframe(frame={self.frame}, value={self.value})"
