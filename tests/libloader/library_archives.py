"""
Helpers for building archives with LibLoader-* manifests.
"""

import hashlib
import io
import pathlib
import zipfile
from typing import Dict, List, Optional


def sha512(data: bytes) -> str:
    return hashlib.sha512(data).hexdigest()


def manifest_text(declarations: List[Dict[str, str]], namespace: str = "LibLoader") -> str:
    lines = ["Manifest-Version: 1.0"]
    for index, declaration in enumerate(declarations):
        for field, value in declaration.items():
            if value is not None:
                lines.append(f"{namespace}-{field}{index}: {value}")
    return "\r\n".join(lines) + "\r\n\r\n"


def build_archive(
    path: pathlib.Path,
    declarations: Optional[List[Dict[str, str]]] = None,
    entries: Optional[Dict[str, bytes]] = None,
    manifest: Optional[str] = None,
    compression: int = zipfile.ZIP_STORED,
) -> pathlib.Path:
    """
    Writes a zip archive with a manifest made from declarations plus extra entries.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w", compression=compression) as archive:
        if manifest is None and declarations is not None:
            manifest = manifest_text(declarations)
        if manifest is not None:
            archive.writestr("META-INF/MANIFEST.MF", manifest)
        for name, data in (entries or {}).items():
            archive.writestr(name, data)
    return path


def declaration_fields(
    name: str,
    version: str,
    data: bytes,
    group: str = "com.x",
    file: Optional[str] = None,
    url: Optional[str] = None,
    build_time: Optional[int] = None,
    classifier: Optional[str] = None,
) -> Dict[str, Optional[str]]:
    return {
        "group": group,
        "name": name,
        "classifier": classifier,
        "version": version,
        "digest": sha512(data),
        "file": file,
        "url": url,
        "buildTime": None if build_time is None else str(build_time),
    }


def archive_bytes(
    declarations: Optional[List[Dict[str, str]]] = None,
    entries: Optional[Dict[str, bytes]] = None,
) -> bytes:
    """
    Same as build_archive, but returns the archive as bytes so it can be nested.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        archive.writestr("META-INF/MANIFEST.MF", manifest_text(declarations or []))
        for name, data in (entries or {}).items():
            archive.writestr(name, data)
    return buffer.getvalue()


def corrupt_entry(path: pathlib.Path, entry_name: str) -> None:
    """
    Overwrites the stored bytes of one entry in place, leaving the zip directory intact.

    A stored entry then fails its CRC check; a deflated one fails to inflate.
    """
    with zipfile.ZipFile(path) as archive:
        info = archive.getinfo(entry_name)
    data = bytearray(path.read_bytes())
    # Local file header: 30 fixed bytes, then the name and the extra field
    name_length = int.from_bytes(data[info.header_offset + 26:info.header_offset + 28], "little")
    extra_length = int.from_bytes(data[info.header_offset + 28:info.header_offset + 30], "little")
    start = info.header_offset + 30 + name_length + extra_length
    for offset in range(start, start + info.compress_size):
        data[offset] ^= 0xFF
    path.write_bytes(bytes(data))
