"""ZIP packaging of generated documents."""

import re
import zipfile
from io import BytesIO
from typing import Mapping

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9]+")


def safe_filename(text: str | None, max_length: int = 30, fallback: str = "NA") -> str:
    """Collapse anything but ASCII letters/digits to "_" for use in file names."""
    cleaned = _UNSAFE_CHARS.sub("_", text or "").strip("_")[:max_length].rstrip("_")
    return cleaned or fallback


def build_zip(files: Mapping[str, bytes]) -> bytes:
    """Pack name -> content into a deflated ZIP archive, in mapping order."""
    buffer = BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for name, content in files.items():
            archive.writestr(name, content)
    return buffer.getvalue()
