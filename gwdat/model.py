"""Decoding of model geometry buffers and material texture references."""

from __future__ import annotations

import math
import struct
from enum import IntEnum, IntFlag

from gwdat.mesh import Bounds, Material, Mesh, Triangle, Vec3, Vertex

_FLT_MAX = 3.4028234663852886e38
_FLT_MIN = 1.1754943508222875e-38

_VEC3 = struct.Struct("<3f")
_VEC2 = struct.Struct("<2f")
_HALF2 = struct.Struct("<2e")
_HALF3 = struct.Struct("<3e")
_TRIANGLE = struct.Struct("<3H")

# Only the low seven bits of each texture coordinate mask are used.
_UV_SLOTS = 7


class VertexFormat(IntFlag):
    """Bits of the flexible vertex format describing a vertex's fields."""

    POSITION = 0x00000001
    WEIGHTS = 0x00000002
    GROUP = 0x00000004
    NORMAL = 0x00000008
    COLOR = 0x00000010
    TANGENT = 0x00000020
    BITANGENT = 0x00000040
    TANGENT_FRAME = 0x00000080
    UV32_MASK = 0x0000FF00
    UV16_MASK = 0x00FF0000
    UNKNOWN1 = 0x01000000
    UNKNOWN2 = 0x02000000
    UNKNOWN3 = 0x04000000
    UNKNOWN4 = 0x08000000
    POSITION_COMPRESSED = 0x10000000
    UNKNOWN5 = 0x20000000


class TextureToken(IntEnum):
    """Tokens identifying the role of a texture referenced by a material."""

    DIFFUSE = 0x67531924
    NORMAL = 0x1816C9EE
    SPECULAR = 0x59519613
    LIGHT_MAP = 0x680BBD87
    DYE = 0xE6169724


_FIELD_SIZES: tuple[tuple[VertexFormat, int], ...] = (
    (VertexFormat.POSITION, 12),
    (VertexFormat.WEIGHTS, 4),
    (VertexFormat.GROUP, 4),
    (VertexFormat.NORMAL, 12),
    (VertexFormat.COLOR, 4),
    (VertexFormat.TANGENT, 12),
    (VertexFormat.BITANGENT, 12),
    (VertexFormat.TANGENT_FRAME, 12),
    (VertexFormat.UNKNOWN1, 48),
    (VertexFormat.UNKNOWN2, 4),
    (VertexFormat.UNKNOWN3, 4),
    (VertexFormat.UNKNOWN4, 16),
    (VertexFormat.POSITION_COMPRESSED, 6),
    (VertexFormat.UNKNOWN5, 12),
)

_TEXTURE_FIELDS = {
    TextureToken.DIFFUSE: "diffuse_map",
    TextureToken.NORMAL: "normal_map",
    TextureToken.SPECULAR: "specular_map",
    TextureToken.LIGHT_MAP: "light_map",
    TextureToken.DYE: "dye",
}


def _uv_slots(vertex_format: int, mask: int, shift: int) -> list[int]:
    bits = (vertex_format & mask) >> shift
    return [slot for slot in range(_UV_SLOTS) if (bits >> slot) & 1]


def vertex_size(vertex_format: int) -> int:
    """Return the size in bytes of one vertex of the given format."""
    vertex_format = int(vertex_format)
    size = sum(width for flag, width in _FIELD_SIZES if vertex_format & flag)
    size += 8 * len(_uv_slots(vertex_format, VertexFormat.UV32_MASK, 8))
    size += 4 * len(_uv_slots(vertex_format, VertexFormat.UV16_MASK, 16))
    return size


def _read_vertex(data: bytes, pos: int, vertex_format: int) -> Vertex:
    vertex = Vertex()
    if vertex_format & VertexFormat.POSITION:
        vertex.position = _VEC3.unpack_from(data, pos)
        pos += 12
    if vertex_format & VertexFormat.WEIGHTS:
        pos += 4
    if vertex_format & VertexFormat.GROUP:
        pos += 4
    if vertex_format & VertexFormat.NORMAL:
        vertex.normal = _VEC3.unpack_from(data, pos)
        pos += 12
    if vertex_format & VertexFormat.COLOR:
        pos += 4
    for flag in (VertexFormat.TANGENT, VertexFormat.BITANGENT, VertexFormat.TANGENT_FRAME):
        if vertex_format & flag:
            pos += 12
    # Every full-precision coordinate set overwrites the previous one.
    for _ in _uv_slots(vertex_format, VertexFormat.UV32_MASK, 8):
        vertex.uv = _VEC2.unpack_from(data, pos)
        pos += 8
    # Of the half-precision sets only the first is kept.
    for number, _ in enumerate(_uv_slots(vertex_format, VertexFormat.UV16_MASK, 16)):
        if number == 0:
            vertex.uv = _HALF2.unpack_from(data, pos)
        pos += 4
    for flag, width in (
        (VertexFormat.UNKNOWN1, 48),
        (VertexFormat.UNKNOWN2, 4),
        (VertexFormat.UNKNOWN3, 4),
        (VertexFormat.UNKNOWN4, 16),
    ):
        if vertex_format & flag:
            pos += width
    if vertex_format & VertexFormat.POSITION_COMPRESSED:
        vertex.position = _HALF3.unpack_from(data, pos)
    return vertex


def read_vertices(mesh: Mesh, data: bytes, count: int, vertex_format: int) -> None:
    """Fill ``mesh.vertices`` with ``count`` vertices decoded from ``data``."""
    vertex_format = int(vertex_format)
    data = bytes(data)
    stride = vertex_size(vertex_format)
    if count < 0:
        raise ValueError(f"invalid vertex count {count}")
    if count * stride > len(data):
        raise ValueError(
            f"vertex data is {len(data)} bytes, {count * stride} needed "
            f"for {count} vertices"
        )
    mesh.has_normal = bool(vertex_format & VertexFormat.NORMAL)
    mesh.has_uv = bool(vertex_format & (VertexFormat.UV32_MASK | VertexFormat.UV16_MASK))
    mesh.vertices = [_read_vertex(data, i * stride, vertex_format) for i in range(count)]


def _indices(data: bytes, index_count: int) -> tuple[int, ...]:
    if index_count < 0:
        raise ValueError(f"invalid index count {index_count}")
    if 2 * index_count > len(data):
        raise ValueError(
            f"index data is {len(data)} bytes, {2 * index_count} needed"
        )
    return struct.unpack_from(f"<{index_count}H", bytes(data))


def read_triangles(mesh: Mesh, data: bytes, index_count: int) -> None:
    """Fill ``mesh.triangles`` from 16-bit indices, flipping each face's winding."""
    _indices(data, index_count)
    used = (index_count // 3) * _TRIANGLE.size
    mesh.triangles = [
        Triangle(first, third, second)
        for first, second, third in _TRIANGLE.iter_unpack(bytes(data)[:used])
    ]


def compute_bounds(mesh: Mesh, data: bytes, index_count: int) -> None:
    """Set ``mesh.bounds`` to the box around every vertex the indices refer to.

    The maximum starts at the smallest positive float, so it never drops
    below that value on any axis.
    """
    lowest = [_FLT_MAX] * 3
    highest = [_FLT_MIN] * 3
    for index in _indices(data, index_count):
        if index >= len(mesh.vertices):
            raise ValueError(
                f"index {index} is out of range for {len(mesh.vertices)} vertices"
            )
        position = mesh.vertices[index].position
        lowest = [min(a, b) for a, b in zip(lowest, position)]
        highest = [max(a, b) for a, b in zip(highest, position)]
    mesh.bounds = Bounds(tuple(lowest), tuple(highest))  # type: ignore[arg-type]


def _normalized(vector: Vec3) -> Vec3:
    length = math.sqrt(sum(c * c for c in vector))
    if length == 0.0:
        return vector
    return tuple(c / length for c in vector)  # type: ignore[return-value]


def normalize_normals(mesh: Mesh) -> None:
    """Scale every vertex normal to unit length; zero normals are left alone."""
    for vertex in mesh.vertices:
        vertex.normal = _normalized(vertex.normal)


def _sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def compute_vertex_normals(mesh: Mesh) -> None:
    """Add each face's unit normal to the normals of its three vertices.

    Faces are taken in their original winding, undoing the flip made when
    the triangles were read. The sums are not normalised afterwards.
    """
    vertices = mesh.vertices
    for triangle in mesh.triangles:
        ia, ib, ic = triangle.index1, triangle.index3, triangle.index2
        pb = vertices[ib].position
        face = _normalized(_cross(
            _sub(vertices[ia].position, pb),
            _sub(vertices[ic].position, pb),
        ))
        for index in (ia, ib, ic):
            normal = vertices[index].normal
            vertices[index].normal = (
                normal[0] + face[0], normal[1] + face[1], normal[2] + face[2]
            )


def _rotate(vector: Vec3) -> Vec3:
    x, y, z = vector
    return (x, -z, -y)


def rotate_zy_invert_z(mesh: Mesh) -> None:
    """Swap the Y and Z axes and negate both, for positions and present normals."""
    for vertex in mesh.vertices:
        vertex.position = _rotate(vertex.position)
        if mesh.has_normal:
            vertex.normal = _rotate(vertex.normal)


def assign_texture(material: Material, token: int, file_id: int) -> TextureToken | None:
    """Record a texture reference on ``material`` according to its token.

    The stored id is one past ``file_id``, the id found in the file
    reference. Returns the matched token, or None for an unknown token,
    in which case the material is left unchanged.
    """
    try:
        role = TextureToken(token & 0xFFFFFFFF)
    except ValueError:
        return None
    setattr(material, _TEXTURE_FIELDS[role], file_id + 1)
    return role