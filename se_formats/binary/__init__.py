from .stream import IntWidth, width_for, BinaryReader, BinaryWriter
from .flags import (
    AnimPresence,
    ModelPresence,
    BonePresence,
    MeshPresence,
    anim_presence,
    model_presence,
    bone_presence,
    mesh_presence,
    model_flags,
    bone_support_from_flags,
)

__all__ = [
    'IntWidth',
    'width_for',
    'BinaryReader',
    'BinaryWriter',
    'AnimPresence',
    'ModelPresence',
    'BonePresence',
    'MeshPresence',
    'anim_presence',
    'model_presence',
    'bone_presence',
    'mesh_presence',
    'model_flags',
    'bone_support_from_flags',
]
