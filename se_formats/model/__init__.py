from .bone import Bone
from .mesh import Mesh, Vertex
from .material import Material, SimpleMaterial
from .model import Model, BoneSupport

__all__ = [
    'Bone',
    'Mesh',
    'Vertex',
    'Material',
    'SimpleMaterial',
    'Model',
    'BoneSupport',
]
