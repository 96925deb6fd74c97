from typing import List, Optional, Tuple, Sequence
import numpy as np


WHITE = np.array([255, 255, 255, 255], dtype=np.uint8)


class Vertex:
    """Vertex with position, UV layers, normal, color and skin weights"""

    def __init__(self, position: Optional[Sequence[float]] = None):
        self.position: np.ndarray = (np.zeros(3) if position is None
                                     else np.asarray(position, dtype=np.float64))
        self.uvs: List[np.ndarray] = []
        self.normal: np.ndarray = np.zeros(3)
        self.color: np.ndarray = WHITE.copy()  # RGBA
        self.weights: List[Tuple[int, float]] = []  # (bone index, weight)

    def add_uv(self, u: float, v: float) -> None:
        self.uvs.append(np.array([u, v], dtype=np.float64))

    def add_weight(self, bone_index: int, weight: float) -> None:
        self.weights.append((bone_index, weight))

    def has_normal(self) -> bool:
        return bool(np.any(self.normal != 0))

    def has_color(self) -> bool:
        return not np.array_equal(self.color, WHITE)

    def __repr__(self) -> str:
        return f"Vertex(position={self.position.tolist()}, uvs={len(self.uvs)}, weights={len(self.weights)})"


class Mesh:
    """
    Mesh class for storing geometry and skinning data

    Each entry of ``material_references`` is the material index used by the
    UV layer at the same position, so every vertex is expected to carry
    ``len(material_references)`` UVs.
    """

    def __init__(self):
        self.vertices: List[Vertex] = []
        self.faces: List[Tuple[int, int, int]] = []
        self.material_references: List[int] = []

    def add_vertex(self, vertex: Vertex) -> None:
        self.vertices.append(vertex)

    def add_face(self, index1: int, index2: int, index3: int) -> None:
        self.faces.append((index1, index2, index3))

    def add_material_reference(self, material_index: int) -> None:
        self.material_references.append(material_index)

    def get_vertex_count(self) -> int:
        return len(self.vertices)

    def get_face_count(self) -> int:
        return len(self.faces)

    @property
    def max_skin_influence(self) -> int:
        """Largest number of weights on any single vertex"""
        return max((len(v.weights) for v in self.vertices), default=0)

    def get_positions(self) -> np.ndarray:
        """
        Get all vertex positions as one array

        Returns:
            Nx3 array
        """
        if not self.vertices:
            return np.zeros((0, 3))
        return np.stack([v.position for v in self.vertices])

    def to_json(self) -> dict:
        return {
            "vertex_count": self.get_vertex_count(),
            "face_count": self.get_face_count(),
            "material_references": list(self.material_references),
            "max_skin_influence": self.max_skin_influence,
        }

    def __repr__(self) -> str:
        return (f"Mesh(vertices={self.get_vertex_count()}, faces={self.get_face_count()}, "
                f"materials={len(self.material_references)})")
