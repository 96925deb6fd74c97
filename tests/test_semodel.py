import io
import os
import struct
import tempfile
import unittest

import numpy as np

from se_formats import (
    BoneSupport,
    FormatError,
    Material,
    Mesh,
    Model,
    SimpleMaterial,
    Vertex,
    read_semodel,
    write_semodel,
)

HEADER_END = 29


def _dump(model: Model) -> bytes:
    stream = io.BytesIO()
    write_semodel(model, stream)
    return stream.getvalue()


def _roundtrip(model: Model) -> Model:
    return read_semodel(io.BytesIO(_dump(model)))


def _skinned_model(bone_count: int, bone_index: int) -> Model:
    model = Model()
    for i in range(bone_count):
        model.add_bone(f"b{i}", i - 1)
    mesh = Mesh()
    vertex = Vertex((0, 0, 0))
    vertex.add_weight(bone_index, 1.0)
    mesh.add_vertex(vertex)
    model.add_mesh(mesh)
    return model


def _full_model() -> Model:
    model = Model(BoneSupport.BOTH)
    model.add_bone("root", -1,
                   global_position=(1, 2, 3), global_rotation=(0, 0, 0, 1),
                   local_position=(1, 2, 3), local_rotation=(0, 0, 0, 1))
    model.add_bone("child", 0,
                   global_position=(1, 2, 4), global_rotation=(0, 0.5, 0, 0.5),
                   local_position=(0, 0, 1), local_rotation=(0, 0.5, 0, 0.5),
                   scale=(2, 2, 2))

    skin = model.add_material(Material("skin", SimpleMaterial("skin_c.png", "skin_n.png", "skin_s.png")))
    model.add_material(Material("custom"))

    mesh = Mesh()
    for i in range(3):
        vertex = Vertex((i, i * 0.5, -i))
        vertex.add_uv(i * 0.25, 1.0 - i * 0.25)
        mesh.add_vertex(vertex)
    mesh.vertices[0].normal = np.array([0.0, 1.0, 0.0])
    mesh.vertices[1].color = np.array([255, 0, 0, 128], dtype=np.uint8)
    mesh.vertices[0].add_weight(0, 1.0)
    mesh.vertices[1].add_weight(0, 0.5)
    mesh.vertices[1].add_weight(1, 0.5)
    mesh.add_face(0, 1, 2)
    mesh.add_material_reference(skin)
    model.add_mesh(mesh)

    plain = Mesh()
    plain.add_vertex(Vertex((5, 5, 5)))
    model.add_mesh(plain)
    return model


class TestModelDocument(unittest.TestCase):
    def testBoneHelpers(self):
        model = _full_model()
        self.assertEqual(model.get_bone_index("child"), 1)
        self.assertEqual(model.get_bone_index("missing"), -1)
        self.assertTrue(model.get_bone_by_name("root").is_root)
        self.assertFalse(model.bones[1].is_root)
        self.assertEqual([b.name for b in model.get_root_bones()], ["root"])
        self.assertEqual([b.name for b in model.get_children(0)], ["child"])

    def testMaxSkinInfluence(self):
        model = _full_model()
        self.assertEqual(model.meshes[0].max_skin_influence, 2)
        self.assertEqual(model.meshes[1].max_skin_influence, 0)
        self.assertEqual(model.max_skin_influence, 2)

    def testFixedMaxSkinInfluence(self):
        model = _full_model()
        model.max_skin_influence = 4
        self.assertEqual(model.max_skin_influence, 4)
        model.max_skin_influence = None
        self.assertEqual(model.max_skin_influence, 2)
        with self.assertRaises(ValueError):
            model.max_skin_influence = 256

    def testToJsonFile(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "model.json")
            _full_model().to_json_file(path)
            self.assertTrue(os.path.getsize(path) > 0)


class TestWriteSEModel(unittest.TestCase):
    def testHeader(self):
        data = _dump(_full_model())
        self.assertEqual(data[:7], b"SEModel")
        self.assertEqual(struct.unpack_from('<HH', data, 7), (1, 0x14))
        # bones | meshes | materials; globals | locals | scales; all mesh flags
        self.assertEqual(data[11:14], bytes([0x07, 0x07, 0x0F]))
        self.assertEqual(struct.unpack_from('<III', data, 14), (2, 2, 2))
        self.assertEqual(data[26:29], b'\x00\x00\x00')
        self.assertEqual(data[HEADER_END:HEADER_END + 11], b"root\x00child\x00")

    def testEmptyModel(self):
        data = _dump(Model())
        self.assertEqual(len(data), HEADER_END)
        self.assertEqual(data[11:14], b'\x00\x00\x00')

    def testDefaultBonesOmitScale(self):
        model = Model()
        model.add_bone("root")
        data = _dump(model)
        self.assertEqual(data[12], 0x02)
        # name, flags, parent, local position + rotation
        self.assertEqual(len(data), HEADER_END + 5 + 1 + 4 + 28)
        self.assertEqual(struct.unpack_from('<i', data, HEADER_END + 6)[0], -1)

    def testWeightIndexWidth255Bones(self):
        data = _dump(_skinned_model(255, 7))
        self.assertEqual(data[-5:], b'\x07' + struct.pack('<f', 1.0))

    def testWeightIndexWidth256Bones(self):
        data = _dump(_skinned_model(256, 7))
        self.assertEqual(data[-6:], b'\x07\x00' + struct.pack('<f', 1.0))

    def testFaceIndexWidthFollowsMeshVertexCount(self):
        model = Model()
        mesh = Mesh()
        for i in range(256):
            mesh.add_vertex(Vertex((i, 0, 0)))
        mesh.add_face(0, 1, 255)
        model.add_mesh(mesh)
        small = Mesh()
        for i in range(3):
            small.add_vertex(Vertex((i, 0, 0)))
        small.add_face(0, 1, 2)
        model.add_mesh(small)

        data = _dump(model)
        small_size = 11 + 3 * 12 + 3
        self.assertEqual(data[-small_size - 6:-small_size], struct.pack('<3H', 0, 1, 255))
        self.assertEqual(data[-3:], b'\x00\x01\x02')

    def testUnusedUvLayersAreDropped(self):
        model = Model()
        mesh = Mesh()
        vertex = Vertex()
        vertex.add_uv(0.5, 0.5)
        vertex.add_uv(0.25, 0.25)
        mesh.add_vertex(vertex)
        mesh.add_material_reference(0)
        model.add_mesh(mesh)
        with self.assertLogs('se_formats.semodel', level='WARNING'):
            data = _dump(model)
        result = read_semodel(io.BytesIO(data))
        self.assertEqual(len(result.meshes[0].vertices[0].uvs), 1)

    def testFixedInfluencePadsWeights(self):
        model = _skinned_model(2, 1)
        model.max_skin_influence = 4
        data = _dump(model)
        padding = (b'\x00' + struct.pack('<f', 0.0)) * 3
        self.assertEqual(data[-20:], b'\x01' + struct.pack('<f', 1.0) + padding)
        result = read_semodel(io.BytesIO(data))
        self.assertEqual(result.meshes[0].vertices[0].weights, [(1, 1.0)])

    def testFixedInfluenceDropsExtraWeights(self):
        model = _skinned_model(2, 0)
        model.meshes[0].vertices[0].add_weight(1, 0.5)
        model.max_skin_influence = 1
        with self.assertLogs('se_formats.semodel', level='WARNING'):
            data = _dump(model)
        result = read_semodel(io.BytesIO(data))
        self.assertEqual(result.meshes[0].vertices[0].weights, [(0, 1.0)])

    def testWriteToPath(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "model.semodel")
            write_semodel(_full_model(), path)
            result = read_semodel(path)
            self.assertEqual(len(result.bones), 2)


class TestReadSEModel(unittest.TestCase):
    def testDefaultBonesRoundtrip(self):
        model = Model()
        model.add_bone("root")
        model.add_bone("spine", 0, local_position=(0, 1, 0))
        model.add_bone("head", 1, local_position=(0, 0.5, 0))

        result = _roundtrip(model)
        self.assertEqual(result.bone_support, BoneSupport.LOCALS)
        self.assertEqual([b.name for b in result.bones], ["root", "spine", "head"])
        self.assertEqual([b.parent_index for b in result.bones], [-1, 0, 1])
        for original, bone in zip(model.bones, result.bones):
            np.testing.assert_allclose(bone.local_position, original.local_position)
            np.testing.assert_allclose(bone.local_rotation, original.local_rotation)
            np.testing.assert_array_equal(bone.global_position, [0, 0, 0])
            np.testing.assert_array_equal(bone.global_rotation, [0, 0, 0, 1])
            np.testing.assert_array_equal(bone.scale, [1, 1, 1])

    def testFullRoundtrip(self):
        model = _full_model()
        result = _roundtrip(model)

        self.assertEqual(result.bone_support, BoneSupport.BOTH)
        child = result.bones[1]
        np.testing.assert_allclose(child.global_position, [1, 2, 4])
        np.testing.assert_allclose(child.global_rotation, [0, 0.5, 0, 0.5])
        np.testing.assert_allclose(child.local_position, [0, 0, 1])
        np.testing.assert_allclose(child.scale, [2, 2, 2])
        np.testing.assert_allclose(result.bones[0].scale, [1, 1, 1])

        mesh = result.meshes[0]
        self.assertEqual(mesh.faces, [(0, 1, 2)])
        self.assertEqual(mesh.material_references, [0])
        np.testing.assert_allclose(mesh.get_positions(), model.meshes[0].get_positions())
        for original, vertex in zip(model.meshes[0].vertices, mesh.vertices):
            self.assertEqual(len(vertex.uvs), 1)
            np.testing.assert_allclose(vertex.uvs[0], original.uvs[0])
            np.testing.assert_allclose(vertex.normal, original.normal)
            np.testing.assert_array_equal(vertex.color, original.color)
            self.assertEqual(vertex.weights, original.weights)

        plain = result.meshes[1]
        self.assertEqual(plain.get_vertex_count(), 1)
        self.assertEqual(plain.vertices[0].uvs, [])
        self.assertEqual(plain.vertices[0].weights, [])
        self.assertFalse(plain.vertices[0].has_color())
        self.assertEqual(plain.material_references, [])

        self.assertEqual([m.name for m in result.materials], ["skin", "custom"])
        self.assertEqual(result.materials[0].data, model.materials[0].data)
        self.assertIsNone(result.materials[1].data)
        self.assertFalse(result.materials[1].is_simple)

    def testInteriorZeroWeightKeepsSlot(self):
        model = Model()
        for i in range(3):
            model.add_bone(f"b{i}", i - 1)
        mesh = Mesh()
        vertex = Vertex((0, 0, 0))
        vertex.add_weight(1, 0.0)
        vertex.add_weight(2, 1.0)
        mesh.add_vertex(vertex)
        padded = Vertex((1, 0, 0))
        padded.add_weight(2, 1.0)
        mesh.add_vertex(padded)
        model.add_mesh(mesh)

        result = _roundtrip(model)
        self.assertEqual(result.meshes[0].vertices[0].weights, [(1, 0.0), (2, 1.0)])
        self.assertEqual(result.meshes[0].vertices[1].weights, [(2, 1.0)])

    def testGlobalsOnly(self):
        model = Model(BoneSupport.GLOBALS)
        model.add_bone("root", global_position=(0, 0, 2))
        result = _roundtrip(model)
        self.assertEqual(result.bone_support, BoneSupport.GLOBALS)
        np.testing.assert_allclose(result.bones[0].global_position, [0, 0, 2])

    def testBadMagic(self):
        with self.assertRaises(FormatError):
            read_semodel(io.BytesIO(b"SEAnim\x00" + bytes(40)))

    def testTruncated(self):
        data = _dump(_full_model())
        with self.assertRaises(EOFError):
            read_semodel(io.BytesIO(data[:-3]))


if __name__ == '__main__':
    unittest.main()
