"""
SEModel reader/writer.

Layout (little-endian):

    char[7]  magic "SEModel"
    uint16   version (1)
    uint16   header size (0x14)
    uint8    model presence flags (ModelPresence)
    uint8    bone presence flags (BonePresence)
    uint8    mesh presence flags (MeshPresence)
    uint32   bone count
    uint32   mesh count
    uint32   material count
    uint8[3] reserved
    --- bone names, bone records, meshes, materials

Skin weight bone indices are stored at width_for(bone count) and face indices
at width_for(vertex count of the owning mesh).
"""

import logging
from typing import List, Optional

import numpy as np

from .binary.stream import (
    BinaryReader,
    BinaryWriter,
    PathOrStream,
    open_stream,
    width_for,
)
from .binary.flags import (
    BonePresence,
    MeshPresence,
    bone_support_from_flags,
    model_flags,
)
from .errors import FormatError
from .model.bone import Bone
from .model.material import Material, SimpleMaterial
from .model.mesh import Mesh, Vertex
from .model.model import Model

logger = logging.getLogger(__name__)

MAGIC = b"SEModel"
VERSION = 1
HEADER_SIZE = 0x14


def write_semodel(model: Model, target: PathOrStream) -> None:
    """
    Write a model in SEModel format

    Args:
        model: Model to write
        target: File path (created/overwritten) or writable binary stream
    """
    model_presence, bone_flags, mesh_flags = model_flags(model)
    bone_count = len(model.bones)
    fixed_influence = model.max_skin_influence if model.has_fixed_skin_influence else None

    logger.debug(
        "Writing SEModel: %d bones, %d meshes, %d materials, flags %02X/%02X/%02X",
        bone_count, len(model.meshes), len(model.materials),
        model_presence, bone_flags, mesh_flags,
    )

    with open_stream(target, "wb") as f:
        w = BinaryWriter(f)

        w.write(MAGIC)
        w.write_u16(VERSION)
        w.write_u16(HEADER_SIZE)
        w.write_u8(int(model_presence))
        w.write_u8(int(bone_flags))
        w.write_u8(int(mesh_flags))
        w.write_u32(bone_count)
        w.write_u32(len(model.meshes))
        w.write_u32(len(model.materials))
        w.write_padding(3)

        for bone in model.bones:
            w.write_string(bone.name)

        for bone in model.bones:
            _write_bone(w, bone, bone_flags)

        for mesh in model.meshes:
            _write_mesh(w, mesh, mesh_flags, bone_count, fixed_influence)

        for material in model.materials:
            w.write_string(material.name)
            w.write_u8(1 if material.is_simple else 0)
            if material.is_simple:
                w.write_string(material.data.diffuse_map)
                w.write_string(material.data.normal_map)
                w.write_string(material.data.specular_map)


def _write_bone(w: BinaryWriter, bone: Bone, flags: BonePresence) -> None:
    w.write_u8(0)  # Bone flags
    w.write_i32(bone.parent_index)
    # Globals before locals, position before rotation
    if flags & BonePresence.GLOBAL_MATRIX:
        w.write_floats(bone.global_position)
        w.write_floats(bone.global_rotation)
    if flags & BonePresence.LOCAL_MATRIX:
        w.write_floats(bone.local_position)
        w.write_floats(bone.local_rotation)
    if flags & BonePresence.SCALES:
        w.write_floats(bone.scale)


def _write_mesh(w: BinaryWriter, mesh: Mesh, flags: MeshPresence, bone_count: int,
                fixed_influence: Optional[int] = None) -> None:
    layer_count = len(mesh.material_references)
    influence = 0
    if flags & MeshPresence.WEIGHTS:
        influence = mesh.max_skin_influence if fixed_influence is None else fixed_influence

    w.write_u8(0)  # Mesh flags
    w.write_u8(layer_count)
    w.write_u8(influence)
    w.write_u32(mesh.get_vertex_count())
    w.write_u32(mesh.get_face_count())

    for vertex in mesh.vertices:
        w.write_floats(vertex.position)

    if flags & MeshPresence.UVSET:
        dropped = 0
        for vertex in mesh.vertices:
            dropped += max(len(vertex.uvs) - layer_count, 0)
            for layer in range(layer_count):
                if layer < len(vertex.uvs):
                    w.write_floats(vertex.uvs[layer])
                else:
                    w.write_floats((0.0, 0.0))
        if dropped:
            logger.warning(
                "Dropped %d UV coordinates beyond the mesh's %d material references",
                dropped, layer_count,
            )

    if flags & MeshPresence.NORMALS:
        for vertex in mesh.vertices:
            w.write_floats(vertex.normal)

    if flags & MeshPresence.COLOR:
        for vertex in mesh.vertices:
            w.write(np.asarray(vertex.color, dtype=np.uint8).tobytes())

    if flags & MeshPresence.WEIGHTS:
        index_width = width_for(bone_count)
        dropped = sum(max(len(v.weights) - influence, 0) for v in mesh.vertices)
        if dropped:
            logger.warning(
                "Dropped %d skin weights beyond the max skin influence of %d",
                dropped, influence,
            )
        for vertex in mesh.vertices:
            for slot in range(influence):
                if slot < len(vertex.weights):
                    bone_index, weight = vertex.weights[slot]
                else:
                    bone_index, weight = 0, 0.0
                w.write_uint(bone_index, index_width)
                w.write_f32(weight)

    face_width = width_for(mesh.get_vertex_count())
    for face in mesh.faces:
        for index in face:
            w.write_uint(index, face_width)

    for material_index in mesh.material_references:
        w.write_i32(material_index)


def read_semodel(source: PathOrStream) -> Model:
    """
    Read an SEModel file

    Args:
        source: File path or readable binary stream

    Returns:
        Model instance

    Raises:
        FormatError: If the magic does not match
        EOFError: If the stream is truncated
    """
    with open_stream(source, "rb") as f:
        r = BinaryReader(f)

        magic = r.read(len(MAGIC))
        if magic != MAGIC:
            raise FormatError(MAGIC, magic)

        version = r.read_u16()
        header_size = r.read_u16()

        r.read_u8()  # Model presence, implied by the counts below
        bone_flags = BonePresence(r.read_u8())
        mesh_flags = MeshPresence(r.read_u8())

        model = Model(bone_support=bone_support_from_flags(bone_flags))

        bone_count = r.read_u32()
        mesh_count = r.read_u32()
        material_count = r.read_u32()
        r.skip(3)

        logger.debug(
            "Reading SEModel v%d (header size 0x%X): %d bones, %d meshes, %d materials",
            version, header_size, bone_count, mesh_count, material_count,
        )

        names = [r.read_string() for _ in range(bone_count)]
        for name in names:
            model.bones.append(_read_bone(r, name, bone_flags))

        for _ in range(mesh_count):
            model.add_mesh(_read_mesh(r, mesh_flags, bone_count))

        for _ in range(material_count):
            name = r.read_string()
            data = None
            if r.read_u8():
                data = SimpleMaterial(r.read_string(), r.read_string(), r.read_string())
            model.add_material(Material(name, data))

    return model


def _read_bone(r: BinaryReader, name: str, flags: BonePresence) -> Bone:
    r.read_u8()  # Bone flags
    bone = Bone(name, r.read_i32())
    if flags & BonePresence.GLOBAL_MATRIX:
        bone.set_global(r.read_floats(3), r.read_floats(4))
    if flags & BonePresence.LOCAL_MATRIX:
        bone.set_local(r.read_floats(3), r.read_floats(4))
    if flags & BonePresence.SCALES:
        bone.scale = r.read_floats(3)
    return bone


def _read_mesh(r: BinaryReader, flags: MeshPresence, bone_count: int) -> Mesh:
    r.read_u8()  # Mesh flags
    layer_count = r.read_u8()
    influence = r.read_u8()
    vertex_count = r.read_u32()
    face_count = r.read_u32()

    mesh = Mesh()
    positions = r.read_array('<f4', (vertex_count, 3)).astype(np.float64)
    vertices: List[Vertex] = [Vertex(position) for position in positions]

    if flags & MeshPresence.UVSET:
        uvs = r.read_array('<f4', (vertex_count, layer_count, 2)).astype(np.float64)
        for vertex, layers in zip(vertices, uvs):
            vertex.uvs = list(layers)

    if flags & MeshPresence.NORMALS:
        normals = r.read_array('<f4', (vertex_count, 3)).astype(np.float64)
        for vertex, normal in zip(vertices, normals):
            vertex.normal = normal

    if flags & MeshPresence.COLOR:
        colors = r.read_array('u1', (vertex_count, 4))
        for vertex, color in zip(vertices, colors):
            vertex.color = color.copy()

    if flags & MeshPresence.WEIGHTS:
        index_width = width_for(bone_count)
        for vertex in vertices:
            pairs = [(r.read_uint(index_width), r.read_f32()) for _ in range(influence)]
            # Trailing (0, 0.0) pairs pad the vertex up to the influence count
            while pairs and pairs[-1] == (0, 0.0):
                pairs.pop()
            for bone_index, weight in pairs:
                vertex.add_weight(bone_index, weight)

    mesh.vertices = vertices

    face_width = width_for(vertex_count)
    for _ in range(face_count):
        mesh.add_face(r.read_uint(face_width), r.read_uint(face_width), r.read_uint(face_width))

    for _ in range(layer_count):
        mesh.add_material_reference(r.read_i32())

    return mesh
