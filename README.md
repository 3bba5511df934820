# gwdat

Pure-Python decoders for assets taken from a game's data archive. It covers block-compressed texture data, model geometry buffers and material texture references, plain text, and MP3 sounds wrapped in a fixed header.

## Installation

```
pip install .
```

To run the test suite, install the `test` extra and then run pytest:

```
pip install .[test]
pytest
```

## Modules

### `gwdat.dxt`: block-compressed textures

- `decode_dxt1(data, width, height)` decodes DXT1. It produces an alpha channel that is 0 only for punched-out pixels.
- `decode_dxt3(data, width, height)` decodes DXT2/DXT3, which store explicit 4-bit alpha.
- `decode_dxt5(data, width, height)` decodes DXT4/DXT5, which store interpolated alpha.
- `decode_dxta(data, width, height)` decodes single-channel blocks into a grey image with no alpha.
- `decode_3dcx(data, width, height)` decodes two-channel normal maps. It rebuilds blue from red and green, and it inverts green in the output.

Each decoder returns a `DecodedImage` with these members:

- `width`, `height`.
- `rgb`: packed RGB bytes, stored row by row.
- `alpha`: 8-bit alpha, or `None`.
- `pixel(x, y)` and `alpha_at(x, y)`.
- `to_image()`, which returns a Pillow RGB or RGBA image.

Only whole 4×4 blocks are decoded. Pixels beyond the last whole block column or row stay black. Input that is too short for the requested size raises `ValueError`.

```python
from gwdat.dxt import decode_dxt1

block = bytes([0x00, 0xF8, 0x1F, 0x00, 0, 0, 0, 0])
image = decode_dxt1(block, 4, 4)
assert image.pixel(0, 0) == (255, 0, 0)
image.to_image().save("block.png")
```

### `gwdat.mesh`: model data types

- `Vertex` holds a position, a normal and a UV.
- `Triangle` holds three indices. `Triangle.indices` gives them back as a tuple.
- `Bounds` is a frozen axis-aligned box with `merge(other)`, `center()` and `size()`.
- `Mesh` holds vertices, triangles, the material name and index, flags, bounds, and the `has_normal` / `has_uv` flags.
- `Material` holds the material id, flags and file, plus the file ids of its diffuse, normal, specular, light-map and dye textures.
- `Model` holds `meshes` and `materials`. It also offers these methods:
  - `add_meshes(amount)` and `add_materials(amount)`, which append empty entries and return them.
  - `bounds()`, which returns the box around all meshes, or an all-zero box when the model has no meshes.

### `gwdat.model`: geometry buffers and materials

- `VertexFormat` is the set of flexible-vertex-format flags. `vertex_size(vertex_format)` gives the byte size of one vertex.
- `read_vertices(mesh, data, count, vertex_format)` fills `mesh.vertices` and sets `has_normal` and `has_uv`.
- `read_triangles(mesh, data, index_count)` reads 16-bit indices into triangles and flips each face's winding.
- `compute_bounds(mesh, data, index_count)` sets `mesh.bounds` from the vertices that the indices refer to.
- `normalize_normals(mesh)` scales normals to unit length.
- `compute_vertex_normals(mesh)` adds each face's unit normal to the normals of its vertices.
- `rotate_zy_invert_z(mesh)` swaps and negates the Y and Z axes of positions, and of normals when the mesh has them.
- `TextureToken` and `assign_texture(material, token, file_id)` record a texture reference on a material. The stored id is `file_id + 1`. The function returns `None` for an unknown token.

```python
from gwdat.model import VertexFormat, vertex_size

assert vertex_size(VertexFormat.POSITION | VertexFormat.NORMAL) == 24
```

### `gwdat.text`: text and sounds

- `read_text(data)` keeps the 7-bit printable and control characters and drops every other byte.
- `extract_mp3(data)` strips the 36-byte sound header. It raises `ValueError` when the data is shorter than the header.

## What this package does not do

- It does not open the archive, look up entries or decompress them. All functions take bytes that have already been extracted.
- It does not parse container files or image headers. There is no reading of DDS or texture file headers, and no PNG, JPEG or WebP loading. You pass the decoders raw block data together with the image size.
- It does not decode bitmap fonts or text string tables.
- It does not parse model files as a whole. It decodes geometry and material buffers that have already been located in the file.
- It has no command-line tool and no viewer.