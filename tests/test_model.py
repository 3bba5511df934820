import math
import struct

import pytest

from gwdat.mesh import Material, Mesh, Vertex
from gwdat.model import (
    TextureToken,
    VertexFormat,
    assign_texture,
    compute_bounds,
    compute_vertex_normals,
    normalize_normals,
    read_triangles,
    read_vertices,
    rotate_zy_invert_z,
    vertex_size,
)


def _dot(a, b):
    return sum(x * y for x, y in zip(a, b))


def _sub(a, b):
    return tuple(x - y for x, y in zip(a, b))


@pytest.mark.parametrize(
    "fmt, size",
    [
        (VertexFormat.POSITION, 12),
        (VertexFormat.WEIGHTS, 4),
        (VertexFormat.GROUP, 4),
        (VertexFormat.COLOR, 4),
        (VertexFormat.UNKNOWN1, 48),
        (VertexFormat.UNKNOWN4, 16),
        (VertexFormat.POSITION_COMPRESSED, 6),
        (VertexFormat.UNKNOWN5, 12),
        (0x100, 8),
        (0x10000, 4),
        (0x8000, 0),
        (0x800000, 0),
    ],
)
def test_vertex_size_single_fields(fmt, size):
    assert vertex_size(fmt) == size


def test_vertex_size_is_sum_of_fields():
    combined = VertexFormat.POSITION | VertexFormat.NORMAL | VertexFormat.COLOR | 0x300
    parts = [VertexFormat.POSITION, VertexFormat.NORMAL, VertexFormat.COLOR, 0x100, 0x200]
    assert vertex_size(combined) == sum(vertex_size(p) for p in parts)


def test_read_vertices_position_and_normal():
    fmt = VertexFormat.POSITION | VertexFormat.NORMAL
    data = struct.pack("<3f3f", 1.0, 2.5, -3.0, 0.0, 1.0, 0.0)
    data += struct.pack("<3f3f", -1.0, 0.5, 4.0, 1.0, 0.0, 0.0)
    mesh = Mesh()
    read_vertices(mesh, data, 2, fmt)
    assert [v.position for v in mesh.vertices] == [(1.0, 2.5, -3.0), (-1.0, 0.5, 4.0)]
    assert [v.normal for v in mesh.vertices] == [(0.0, 1.0, 0.0), (1.0, 0.0, 0.0)]
    assert mesh.has_normal is True
    assert mesh.has_uv is False


def test_read_vertices_skips_unused_fields():
    fmt = VertexFormat.POSITION | VertexFormat.WEIGHTS | VertexFormat.GROUP | VertexFormat.NORMAL
    data = struct.pack("<3f", 1.0, 2.0, 3.0) + b"\xaa" * 8 + struct.pack("<3f", 0.0, 0.0, 1.0)
    mesh = Mesh()
    read_vertices(mesh, data, 1, fmt)
    assert mesh.vertices[0].position == (1.0, 2.0, 3.0)
    assert mesh.vertices[0].normal == (0.0, 0.0, 1.0)


def test_read_vertices_half_uv():
    fmt = VertexFormat.POSITION | 0x10000
    data = struct.pack("<3f2e", 1.0, 1.0, 1.0, 0.5, 0.25)
    mesh = Mesh()
    read_vertices(mesh, data, 1, fmt)
    assert mesh.vertices[0].uv == (0.5, 0.25)
    assert mesh.has_uv is True


def test_read_vertices_first_half_uv_wins():
    fmt = 0x30000
    data = struct.pack("<2e2e", 0.5, 0.25, 1.5, 2.0)
    mesh = Mesh()
    read_vertices(mesh, data, 1, fmt)
    assert mesh.vertices[0].uv == (0.5, 0.25)


def test_read_vertices_last_float_uv_wins():
    fmt = 0x300
    data = struct.pack("<2f2f", 0.5, 0.25, 1.5, 2.0)
    mesh = Mesh()
    read_vertices(mesh, data, 1, fmt)
    assert mesh.vertices[0].uv == (1.5, 2.0)


def test_read_vertices_compressed_position():
    fmt = VertexFormat.POSITION_COMPRESSED
    data = struct.pack("<3e", 1.5, -2.0, 0.5)
    mesh = Mesh()
    read_vertices(mesh, data, 1, fmt)
    assert mesh.vertices[0].position == (1.5, -2.0, 0.5)


def test_read_vertices_short_data_raises():
    mesh = Mesh()
    with pytest.raises(ValueError):
        read_vertices(mesh, b"\x00" * 20, 2, VertexFormat.POSITION)


def test_read_triangles_flips_winding():
    data = struct.pack("<6H", 0, 1, 2, 3, 4, 5)
    mesh = Mesh()
    read_triangles(mesh, data, 6)
    assert [t.indices for t in mesh.triangles] == [(0, 2, 1), (3, 5, 4)]


def test_read_triangles_ignores_partial_face():
    data = struct.pack("<4H", 0, 1, 2, 3)
    mesh = Mesh()
    read_triangles(mesh, data, 4)
    assert len(mesh.triangles) == 1


def test_read_triangles_short_data_raises():
    with pytest.raises(ValueError):
        read_triangles(Mesh(), b"\x00\x00", 3)


def test_compute_bounds():
    mesh = Mesh(vertices=[
        Vertex(position=(1.0, 5.0, 2.0)),
        Vertex(position=(3.0, 2.0, 4.0)),
        Vertex(position=(-9.0, -9.0, -9.0)),
    ])
    compute_bounds(mesh, struct.pack("<3H", 0, 1, 1), 3)
    assert mesh.bounds.min == (1.0, 2.0, 2.0)
    assert mesh.bounds.max == (3.0, 5.0, 4.0)


def test_compute_bounds_bad_index_raises():
    mesh = Mesh(vertices=[Vertex()])
    with pytest.raises(ValueError):
        compute_bounds(mesh, struct.pack("<H", 5), 1)


def test_rotate_positions_and_normals():
    mesh = Mesh(vertices=[Vertex(position=(1.0, 2.0, 3.0), normal=(4.0, 5.0, 6.0))],
                has_normal=True)
    rotate_zy_invert_z(mesh)
    assert mesh.vertices[0].position == (1.0, -3.0, -2.0)
    assert mesh.vertices[0].normal == (4.0, -6.0, -5.0)


def test_rotate_leaves_missing_normals():
    mesh = Mesh(vertices=[Vertex(position=(1.0, 2.0, 3.0), normal=(4.0, 5.0, 6.0))])
    rotate_zy_invert_z(mesh)
    assert mesh.vertices[0].normal == (4.0, 5.0, 6.0)


def test_rotate_twice_is_identity():
    mesh = Mesh(vertices=[Vertex(position=(1.5, -2.0, 7.0))])
    rotate_zy_invert_z(mesh)
    rotate_zy_invert_z(mesh)
    assert mesh.vertices[0].position == (1.5, -2.0, 7.0)


def test_normalize_normals_unit_length_same_direction():
    mesh = Mesh(vertices=[Vertex(normal=(3.0, 4.0, 0.0)), Vertex(normal=(0.0, 0.0, 0.0))])
    normalize_normals(mesh)
    normal = mesh.vertices[0].normal
    assert math.isclose(math.sqrt(_dot(normal, normal)), 1.0)
    assert math.isclose(normal[0] * 4.0, normal[1] * 3.0)
    assert mesh.vertices[1].normal == (0.0, 0.0, 0.0)


def _triangle_mesh():
    mesh = Mesh(vertices=[
        Vertex(position=(0.0, 0.0, 0.0)),
        Vertex(position=(1.0, 0.0, 0.0)),
        Vertex(position=(0.0, 1.0, 0.0)),
    ])
    read_triangles(mesh, struct.pack("<3H", 0, 1, 2), 3)
    return mesh


def test_compute_vertex_normals_perpendicular_unit():
    mesh = _triangle_mesh()
    compute_vertex_normals(mesh)
    p = [v.position for v in mesh.vertices]
    for vertex in mesh.vertices:
        n = vertex.normal
        assert math.isclose(_dot(n, n), 1.0)
        assert math.isclose(_dot(n, _sub(p[1], p[0])), 0.0, abs_tol=1e-12)
        assert math.isclose(_dot(n, _sub(p[2], p[0])), 0.0, abs_tol=1e-12)


def test_compute_vertex_normals_accumulates():
    mesh = _triangle_mesh()
    mesh.vertices.append(Vertex(position=(1.0, 1.0, 0.0)))
    read_triangles(mesh, struct.pack("<6H", 0, 1, 2, 1, 3, 2), 6)
    compute_vertex_normals(mesh)
    shared = mesh.vertices[1].normal
    single = mesh.vertices[0].normal
    assert math.isclose(_dot(shared, shared), 4.0)
    assert math.isclose(_dot(single, single), 1.0)


@pytest.mark.parametrize(
    "token, field",
    [
        (TextureToken.DIFFUSE, "diffuse_map"),
        (TextureToken.NORMAL, "normal_map"),
        (TextureToken.SPECULAR, "specular_map"),
        (TextureToken.LIGHT_MAP, "light_map"),
        (TextureToken.DYE, "dye"),
    ],
)
def test_assign_texture(token, field):
    material = Material()
    assert assign_texture(material, int(token), 41) is token
    assert getattr(material, field) == 42


def test_assign_texture_masks_high_bits():
    material = Material()
    assert assign_texture(material, 0x1_67531924, 9) is TextureToken.DIFFUSE
    assert material.diffuse_map == 10


def test_assign_texture_unknown_token():
    material = Material()
    assert assign_texture(material, 0x12345678, 9) is None
    assert material == Material()