"""In-memory model data: meshes, materials and their bounding boxes."""

from __future__ import annotations

from dataclasses import dataclass, field

Vec2 = tuple[float, float]
Vec3 = tuple[float, float, float]

_ZERO2: Vec2 = (0.0, 0.0)
_ZERO3: Vec3 = (0.0, 0.0, 0.0)


@dataclass
class Vertex:
    """A mesh vertex: position, normal and first texture coordinate."""

    position: Vec3 = _ZERO3
    normal: Vec3 = _ZERO3
    uv: Vec2 = _ZERO2


@dataclass
class Triangle:
    """Three indices into a mesh's vertex list."""

    index1: int = 0
    index2: int = 0
    index3: int = 0

    @property
    def indices(self) -> tuple[int, int, int]:
        """The three indices in stored order."""
        return self.index1, self.index2, self.index3


@dataclass(frozen=True)
class Bounds:
    """An axis-aligned bounding box."""

    min: Vec3 = _ZERO3
    max: Vec3 = _ZERO3

    def merge(self, other: Bounds) -> Bounds:
        """Return the smallest box enclosing both this box and ``other``."""
        return Bounds(
            tuple(map(min, self.min, other.min)),  # type: ignore[arg-type]
            tuple(map(max, self.max, other.max)),  # type: ignore[arg-type]
        )

    def center(self) -> Vec3:
        """The point halfway between the minimum and maximum corners."""
        return tuple(  # type: ignore[return-value]
            lo * 0.5 + hi * 0.5 for lo, hi in zip(self.min, self.max)
        )

    def size(self) -> Vec3:
        """The extent of the box along each axis."""
        return tuple(  # type: ignore[return-value]
            hi - lo for lo, hi in zip(self.min, self.max)
        )


@dataclass
class Mesh:
    """A sub-mesh of a model with its geometry and material reference."""

    vertices: list[Vertex] = field(default_factory=list)
    triangles: list[Triangle] = field(default_factory=list)
    material_name: str = ""
    material_index: int = 0
    flags: int = 0
    bounds: Bounds = field(default_factory=Bounds)
    has_normal: bool = False
    has_uv: bool = False


@dataclass
class Material:
    """Material settings and the file ids of the textures it uses."""

    material_id: int = 0
    material_flags: int = 0
    material_file: int = 0
    diffuse_map: int = 0
    normal_map: int = 0
    specular_map: int = 0
    light_map: int = 0
    dye: int = 0


@dataclass
class Model:
    """A model made of meshes and the materials they refer to."""

    meshes: list[Mesh] = field(default_factory=list)
    materials: list[Material] = field(default_factory=list)

    def add_meshes(self, amount: int) -> list[Mesh]:
        """Append ``amount`` empty meshes and return them."""
        if amount < 0:
            raise ValueError(f"cannot add a negative number of meshes: {amount}")
        added = [Mesh() for _ in range(amount)]
        self.meshes.extend(added)
        return added

    def add_materials(self, amount: int) -> list[Material]:
        """Append ``amount`` zeroed materials and return them."""
        if amount < 0:
            raise ValueError(f"cannot add a negative number of materials: {amount}")
        added = [Material() for _ in range(amount)]
        self.materials.extend(added)
        return added

    def bounds(self) -> Bounds:
        """The box enclosing every mesh, or an all-zero box without meshes."""
        if not self.meshes:
            return Bounds()
        result = self.meshes[0].bounds
        for mesh in self.meshes[1:]:
            result = result.merge(mesh.bounds)
        return result