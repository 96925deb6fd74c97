"""
Presence flags for the SE formats.

Each flag byte says which optional blocks follow in the stream. The flags
are computed once from the whole document before anything is written, so a
single bone or vertex that needs a block makes that block present for all of
them.
"""

from enum import IntFlag
from typing import Tuple

from ..anim.anim import Anim
from ..model.model import Model, BoneSupport


class AnimPresence(IntFlag):
    BONE_LOC = 1 << 0
    BONE_ROT = 1 << 1
    BONE_SCALE = 1 << 2
    NOTE = 1 << 6
    CUSTOM = 1 << 7  # Reserved, never set


class ModelPresence(IntFlag):
    BONE = 1 << 0
    MESH = 1 << 1
    MATERIALS = 1 << 2
    CUSTOM = 1 << 7  # Reserved, never set


class BonePresence(IntFlag):
    GLOBAL_MATRIX = 1 << 0
    LOCAL_MATRIX = 1 << 1
    SCALES = 1 << 2


class MeshPresence(IntFlag):
    UVSET = 1 << 0
    NORMALS = 1 << 1
    COLOR = 1 << 2
    WEIGHTS = 1 << 3


_ALL_MESH_FLAGS = MeshPresence.UVSET | MeshPresence.NORMALS | MeshPresence.COLOR | MeshPresence.WEIGHTS


def anim_presence(anim: Anim) -> AnimPresence:
    """Flags for the key kinds and notetracks present in an animation"""
    flags = AnimPresence(0)
    if anim.position_keys:
        flags |= AnimPresence.BONE_LOC
    if anim.rotation_keys:
        flags |= AnimPresence.BONE_ROT
    if anim.scale_keys:
        flags |= AnimPresence.BONE_SCALE
    if anim.notetracks:
        flags |= AnimPresence.NOTE
    return flags


def model_presence(model: Model) -> ModelPresence:
    flags = ModelPresence(0)
    if model.bones:
        flags |= ModelPresence.BONE
    if model.meshes:
        flags |= ModelPresence.MESH
    if model.materials:
        flags |= ModelPresence.MATERIALS
    return flags


def bone_presence(model: Model) -> BonePresence:
    """
    Flags for the per-bone blocks

    Matrices follow the model's bone support mode. Scales are present for
    every bone as soon as one bone has a non-default scale.
    """
    flags = BonePresence(0)
    if not model.bones:
        return flags

    if model.bone_support in (BoneSupport.GLOBALS, BoneSupport.BOTH):
        flags |= BonePresence.GLOBAL_MATRIX
    if model.bone_support in (BoneSupport.LOCALS, BoneSupport.BOTH):
        flags |= BonePresence.LOCAL_MATRIX
    if any(bone.has_scale() for bone in model.bones):
        flags |= BonePresence.SCALES
    return flags


def mesh_presence(model: Model) -> MeshPresence:
    """
    Flags for the per-vertex blocks, shared by every mesh of the model

    Scans all vertices of all meshes and stops once every flag is set.
    """
    flags = MeshPresence(0)
    for mesh in model.meshes:
        for vertex in mesh.vertices:
            if vertex.uvs:
                flags |= MeshPresence.UVSET
            if vertex.has_normal():
                flags |= MeshPresence.NORMALS
            if vertex.has_color():
                flags |= MeshPresence.COLOR
            if vertex.weights:
                flags |= MeshPresence.WEIGHTS
            if flags == _ALL_MESH_FLAGS:
                return flags
    return flags


def bone_support_from_flags(flags: BonePresence) -> BoneSupport:
    """
    Recover the bone support mode from bone presence flags

    A model with neither matrix block keeps the default (LOCALS).
    """
    has_global = bool(flags & BonePresence.GLOBAL_MATRIX)
    has_local = bool(flags & BonePresence.LOCAL_MATRIX)
    if has_global and has_local:
        return BoneSupport.BOTH
    if has_global:
        return BoneSupport.GLOBALS
    return BoneSupport.LOCALS


def model_flags(model: Model) -> Tuple[ModelPresence, BonePresence, MeshPresence]:
    """Compute all three model flag bytes in header order"""
    return model_presence(model), bone_presence(model), mesh_presence(model)
