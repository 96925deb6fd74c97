from typing import List, Optional, Sequence
from enum import Enum
import json
import numpy as np

from .bone import Bone
from .mesh import Mesh
from .material import Material


class BoneSupport(Enum):
    """Which bone matrices a model carries"""
    LOCALS = "locals"
    GLOBALS = "globals"
    BOTH = "both"


class Model:
    """Model class owning bones, meshes and materials in on-disk order"""

    def __init__(self, bone_support: BoneSupport = BoneSupport.LOCALS):
        """
        Initialize model

        Args:
            bone_support: Which bone matrices are stored
        """
        self.bones: List[Bone] = []
        self.meshes: List[Mesh] = []
        self.materials: List[Material] = []
        self.bone_support = bone_support
        self.flags = 0  # Implementation defined, not stored in the file
        self._max_skin_influence: Optional[int] = None

    @classmethod
    def from_config(cls, cfg: dict) -> 'Model':
        return cls(bone_support=BoneSupport(cfg["bone_support"].lower()))

    @property
    def max_skin_influence(self) -> int:
        """
        Weight slots written per vertex

        Defaults to the largest per-vertex weight count across all meshes.
        Assign an int to force a fixed count, or None to go back to the
        derived value.
        """
        if self._max_skin_influence is not None:
            return self._max_skin_influence
        return max((mesh.max_skin_influence for mesh in self.meshes), default=0)

    @max_skin_influence.setter
    def max_skin_influence(self, value: Optional[int]) -> None:
        if value is not None and not 0 <= value <= 0xFF:
            raise ValueError(f"max_skin_influence must be in [0, 255], got {value}")
        self._max_skin_influence = value

    @property
    def has_fixed_skin_influence(self) -> bool:
        return self._max_skin_influence is not None

    # Bone management
    def add_bone(self, name: str, parent_index: int = -1,
                 global_position: Optional[Sequence[float]] = None,
                 global_rotation: Optional[Sequence[float]] = None,
                 local_position: Optional[Sequence[float]] = None,
                 local_rotation: Optional[Sequence[float]] = None,
                 scale: Optional[Sequence[float]] = None) -> Bone:
        """
        Append a bone; its index is its position in the bone list

        Returns:
            The new Bone instance
        """
        bone = Bone(name, parent_index)
        bone.set_global(global_position, global_rotation)
        bone.set_local(local_position, local_rotation)
        if scale is not None:
            bone.scale = np.asarray(scale, dtype=np.float64)
        self.bones.append(bone)
        return bone

    def get_bone_by_name(self, name: str) -> Optional[Bone]:
        """
        Get the first bone with a name

        Returns:
            Bone instance or None if not found
        """
        for bone in self.bones:
            if bone.name == name:
                return bone
        return None

    def get_bone_index(self, name: str) -> int:
        """
        Get the index of the first bone with a name

        Returns:
            Bone index or -1 if not found
        """
        for i, bone in enumerate(self.bones):
            if bone.name == name:
                return i
        return -1

    def get_root_bones(self) -> List[Bone]:
        return [bone for bone in self.bones if bone.is_root]

    def get_children(self, index: int) -> List[Bone]:
        """
        Get all direct children of a bone

        Args:
            index: Parent bone index

        Returns:
            List of child Bone instances
        """
        return [b for b in self.bones if b.parent_index == index]

    def get_bone_count(self) -> int:
        return len(self.bones)

    # Mesh and material management
    def add_mesh(self, mesh: Mesh) -> None:
        self.meshes.append(mesh)

    def get_mesh_count(self) -> int:
        return len(self.meshes)

    def add_material(self, material: Material) -> int:
        """
        Append a material

        Returns:
            Index to use in Mesh.material_references
        """
        self.materials.append(material)
        return len(self.materials) - 1

    def get_material_count(self) -> int:
        return len(self.materials)

    def get_total_vertex_count(self) -> int:
        return sum(mesh.get_vertex_count() for mesh in self.meshes)

    def to_json(self) -> dict:
        """
        Convert model to a JSON-serializable summary

        Returns:
            Dict containing bones in full and per-mesh counts
        """
        return {
            "bone_support": self.bone_support.value,
            "bone_count": len(self.bones),
            "bones": [bone.to_json() for bone in self.bones],
            "meshes": [mesh.to_json() for mesh in self.meshes],
            "materials": [material.to_json() for material in self.materials],
        }

    def to_json_file(self, json_path: str) -> None:
        """
        Save the JSON summary to a file

        Args:
            json_path: Path to save JSON file
        """
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(self.to_json(), f, indent=2, ensure_ascii=False)

    def __repr__(self) -> str:
        return (f"Model(bones={len(self.bones)}, meshes={len(self.meshes)}, "
                f"materials={len(self.materials)})")
