from typing import Optional
import numpy as np


class Bone:
    """Bone class for storing bone transformation data"""

    def __init__(self, name: str, parent_index: int = -1):
        """
        Initialize bone

        Args:
            name: Bone name
            parent_index: Index of the parent bone, -1 for a root bone
        """
        self.name = name
        self.parent_index = parent_index

        # Transform data
        self.global_position: np.ndarray = np.array([0.0, 0.0, 0.0])
        self.global_rotation: np.ndarray = np.array([0.0, 0.0, 0.0, 1.0])  # Quaternion (x, y, z, w)
        self.local_position: np.ndarray = np.array([0.0, 0.0, 0.0])
        self.local_rotation: np.ndarray = np.array([0.0, 0.0, 0.0, 1.0])
        self.scale: np.ndarray = np.array([1.0, 1.0, 1.0])

    @property
    def is_root(self) -> bool:
        return self.parent_index <= -1

    def has_scale(self) -> bool:
        """
        Check if bone scale differs from (1, 1, 1)

        Returns:
            True if any scale component is not 1
        """
        return not np.array_equal(self.scale, np.ones(3))

    def set_global(self, position: Optional[np.ndarray], rotation: Optional[np.ndarray]) -> None:
        if position is not None:
            self.global_position = np.asarray(position, dtype=np.float64)
        if rotation is not None:
            self.global_rotation = np.asarray(rotation, dtype=np.float64)

    def set_local(self, position: Optional[np.ndarray], rotation: Optional[np.ndarray]) -> None:
        if position is not None:
            self.local_position = np.asarray(position, dtype=np.float64)
        if rotation is not None:
            self.local_rotation = np.asarray(rotation, dtype=np.float64)

    def to_json(self) -> dict:
        """
        Convert bone to JSON-serializable dictionary

        Returns:
            Dictionary representation of bone
        """
        return {
            "name": self.name,
            "parent_index": self.parent_index,
            "global_position": self.global_position.tolist(),
            "global_rotation": self.global_rotation.tolist(),
            "local_position": self.local_position.tolist(),
            "local_rotation": self.local_rotation.tolist(),
            "scale": self.scale.tolist()
        }

    def __repr__(self) -> str:
        parent_info = "" if self.is_root else f", parent={self.parent_index}"
        return f"Bone(name='{self.name}'{parent_info})"
