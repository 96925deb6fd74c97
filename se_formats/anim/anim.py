from typing import List, Dict
import numpy as np

from .track import Keyframe, AnimationType


class Anim:
    """Animation class holding per-bone keyframes, modifiers and notetracks"""

    def __init__(self, anim_type: AnimationType = AnimationType.ABSOLUTE,
                 looping: bool = False, frame_rate: float = 30.0,
                 high_precision: bool = False):
        """
        Initialize animation

        Args:
            anim_type: Animation type
            looping: Whether the animation loops
            frame_rate: Frames per second
            high_precision: Whether keys are stored as 64-bit floats
        """
        self.anim_type = anim_type
        self.looping = looping
        self.frame_rate = frame_rate
        self.high_precision = high_precision
        self.delta_tag_name = ""

        # Bone name -> keys, all in insertion order
        self.position_keys: Dict[str, List[Keyframe]] = {}
        self.rotation_keys: Dict[str, List[Keyframe]] = {}
        self.scale_keys: Dict[str, List[Keyframe]] = {}
        # Notification name -> keys (value is always None)
        self.notetracks: Dict[str, List[Keyframe]] = {}
        self.bone_modifiers: Dict[str, AnimationType] = {}

    @classmethod
    def from_config(cls, cfg: dict) -> 'Anim':
        """
        Create an empty animation using configuration defaults

        Args:
            cfg: Config dictionary from load_config()
        """
        return cls(
            anim_type=AnimationType[cfg["anim_type"].upper()],
            looping=cfg["looping"],
            frame_rate=cfg["frame_rate"],
            high_precision=cfg["high_precision"],
        )

    @staticmethod
    def _append(keys: Dict[str, List[Keyframe]], name: str, frame: int, value) -> None:
        if frame < 0:
            raise ValueError(f"Frame index must be non-negative, got {frame}")
        keys.setdefault(name, []).append(Keyframe(frame, value))

    # Key management
    def add_translation_key(self, bone: str, frame: int, x: float, y: float, z: float) -> None:
        """Append a position key to a bone"""
        self._append(self.position_keys, bone, frame, np.array([x, y, z], dtype=np.float64))

    def add_rotation_key(self, bone: str, frame: int, x: float, y: float, z: float, w: float) -> None:
        """Append a rotation key (quaternion x, y, z, w) to a bone"""
        self._append(self.rotation_keys, bone, frame, np.array([x, y, z, w], dtype=np.float64))

    def add_scale_key(self, bone: str, frame: int, x: float, y: float, z: float) -> None:
        """Append a scale key to a bone"""
        self._append(self.scale_keys, bone, frame, np.array([x, y, z], dtype=np.float64))

    def add_notetrack(self, name: str, frame: int) -> None:
        """Append a notification occurrence at a frame"""
        self._append(self.notetracks, name, frame, None)

    def add_bone_modifier(self, bone: str, modifier: AnimationType) -> None:
        """
        Set the animation type override for a bone

        An existing modifier for the same bone is replaced in place.
        """
        self.bone_modifiers[bone] = modifier

    # Derived values
    @property
    def frame_count(self) -> int:
        """Largest frame index used by any key or notetrack, plus one"""
        max_frame = 0
        for keys in (self.position_keys, self.rotation_keys, self.scale_keys, self.notetracks):
            for frames in keys.values():
                for key in frames:
                    max_frame = max(max_frame, key.frame)
        return max_frame + 1

    @property
    def bone_count(self) -> int:
        """Number of distinct bones with position, rotation or scale keys"""
        return len(set(self.position_keys) | set(self.rotation_keys) | set(self.scale_keys))

    @property
    def notification_count(self) -> int:
        return sum(len(frames) for frames in self.notetracks.values())

    def build_bone_tags(self) -> List[str]:
        """
        Build the ordered bone list used on disk

        Bones are taken first-seen from the position, rotation and scale
        mappings in that order. For delta animations the delta bone is
        moved to the front.

        Returns:
            List of bone names
        """
        tags: List[str] = []
        for keys in (self.position_keys, self.rotation_keys, self.scale_keys):
            for bone in keys:
                if bone not in tags:
                    tags.append(bone)

        if self.anim_type == AnimationType.DELTA and self.delta_tag_name in tags:
            tags.remove(self.delta_tag_name)
            tags.insert(0, self.delta_tag_name)

        return tags

    def to_json(self) -> dict:
        """
        Convert animation to a JSON-serializable summary

        Returns:
            Dictionary with scalars, counts and bone order
        """
        return {
            "type": self.anim_type.name.lower(),
            "looping": self.looping,
            "frame_rate": self.frame_rate,
            "high_precision": self.high_precision,
            "delta_tag_name": self.delta_tag_name,
            "frame_count": self.frame_count,
            "bone_count": self.bone_count,
            "notification_count": self.notification_count,
            "bones": self.build_bone_tags(),
            "modifiers": {bone: mod.name.lower() for bone, mod in self.bone_modifiers.items()},
        }

    def __repr__(self) -> str:
        return (f"Anim(type={self.anim_type.name}, frames={self.frame_count}, "
                f"bones={self.bone_count}, notetracks={self.notification_count})")
