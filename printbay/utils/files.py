# printbay/utils/files.py

import re
from pathlib import Path
from typing import Dict

from printbay.core.exceptions import UploadRejected

MODEL_CONTENT_TYPES: Dict[str, str] = {
    ".stl": "model/stl",
    ".obj": "model/obj",
    ".ply": "model/ply",
    ".3mf": "model/3mf",
}
SUPPORTED_EXTENSIONS = tuple(MODEL_CONTENT_TYPES)
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def file_extension(filename: str) -> str:
    return Path(filename or "").suffix.lower()


def is_valid_model_file(filename: str) -> bool:
    """
    Check if the file is a supported 3D model based on extension.
    """
    return file_extension(filename) in SUPPORTED_EXTENSIONS


def content_type_for(filename: str) -> str:
    return MODEL_CONTENT_TYPES.get(file_extension(filename), DEFAULT_CONTENT_TYPE)


def sanitize_segment(s: str, fallback: str = "file") -> str:
    s = (s or "").strip().replace("\\", "_").replace("/", "_")
    s = re.sub(r"[^a-zA-Z0-9._-]", "_", s).strip("._")
    return s[:128] or fallback


def safe_join(root: Path, *parts: str) -> Path:
    """Join sanitised segments under root; refuse anything that escapes it."""
    p = root
    for part in parts:
        p = p / sanitize_segment(part)
    p_res = p.resolve()
    root_res = root.resolve()
    try:
        p_res.relative_to(root_res)
    except ValueError:
        raise UploadRejected(400, "Invalid path")
    return p_res
