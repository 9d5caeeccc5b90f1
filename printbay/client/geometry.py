# printbay/client/geometry.py

import io
import logging
from pathlib import Path

import trimesh

from printbay.schemas.analysis import Dimensions, MeshStats

logger = logging.getLogger(__name__)

MM3_PER_CM3 = 1000.0


class MeshLoadError(ValueError):
    pass


def load_mesh(data: bytes, file_name: str) -> trimesh.Trimesh:
    """Parse STL/OBJ/PLY/3MF bytes; scenes are flattened into one mesh."""
    file_type = Path(file_name).suffix.lstrip(".").lower()
    try:
        loaded = trimesh.load(io.BytesIO(data), file_type=file_type, force="mesh")
    except Exception as e:  # loaders raise format-specific errors
        raise MeshLoadError(f"Could not parse {file_name}: {e}") from e
    if not isinstance(loaded, trimesh.Trimesh) or loaded.is_empty:
        raise MeshLoadError(f"{file_name} contains no mesh geometry")
    return loaded


def measure_mesh(data: bytes, file_name: str) -> MeshStats:
    """
    Genuine counts, bounding-box extents (mm) and volume (cm³).

    Non-watertight meshes still report a volume; it is the absolute signed
    volume and may be inaccurate.
    """
    mesh = load_mesh(data, file_name)
    x, y, z = (float(v) for v in mesh.extents)
    volume_mm3 = abs(float(mesh.volume))
    if not mesh.is_watertight:
        logger.warning("⚠️ %s is not watertight; volume is approximate", file_name)
    return MeshStats(
        vertices=len(mesh.vertices),
        faces=len(mesh.faces),
        volume=round(volume_mm3 / MM3_PER_CM3, 2),
        dimensions=Dimensions(x=round(x, 2), y=round(y, 2), z=round(z, 2)),
        watertight=bool(mesh.is_watertight),
    )
