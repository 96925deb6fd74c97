"""
SE Formats

This module provides classes and codecs for the SE 3D formats:
- SEAnim animations (bone keyframes, modifiers, notetracks)
- SEModel models (bones, skinned meshes, materials)
- Presence flags and variable-width integer fields shared by both
"""

# Animation classes
from .anim import AnimationType, Keyframe, Anim

# Model classes
from .model import (
    Bone,
    Mesh,
    Vertex,
    Material,
    SimpleMaterial,
    Model,
    BoneSupport
)

# Binary helpers
from .binary import (
    IntWidth,
    width_for,
    AnimPresence,
    ModelPresence,
    BonePresence,
    MeshPresence,
    anim_presence,
    model_presence,
    bone_presence,
    mesh_presence,
)

# Codecs
from .seanim import read_seanim, write_seanim
from .semodel import read_semodel, write_semodel
from .errors import FormatError

# Configuration
from .utils.config import load_config, configure_logging

# Define public API
__all__ = [
    # Animation
    'AnimationType',
    'Keyframe',
    'Anim',

    # Model
    'Bone',
    'Mesh',
    'Vertex',
    'Material',
    'SimpleMaterial',
    'Model',
    'BoneSupport',

    # Binary helpers
    'IntWidth',
    'width_for',
    'AnimPresence',
    'ModelPresence',
    'BonePresence',
    'MeshPresence',
    'anim_presence',
    'model_presence',
    'bone_presence',
    'mesh_presence',

    # Codecs
    'read_seanim',
    'write_seanim',
    'read_semodel',
    'write_semodel',
    'FormatError',

    # Configuration
    'load_config',
    'configure_logging',
]

__version__ = '1.0.0'
