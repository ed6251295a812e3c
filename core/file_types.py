"""File-type filter presets keyed by MIME-like type names."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from core.models import Asset

RAW_EXTENSIONS: tuple[str, ...] = (
    "raw", "dng", "nef", "cr2", "arw", "orf", "raf", "pef", "srw", "3fr", "x3f",
    "mrw", "mef", "mos", "erf", "dcr", "rw2", "rwl", "r3d", "ari", "bay", "cap",
    "dcs", "drf", "eip", "k25", "kdc", "mdc", "nrw", "obm", "ptx", "pxn", "rwz",
    "srf", "crw", "fff", "iiq",
)  # fmt: skip

FILE_TYPE_EXTENSIONS: dict[str, tuple[str, ...]] = {
    "image/jpeg": ("jpg", "jpeg"),
    "image/png": ("png",),
    "image/webp": ("webp",),
    "image/gif": ("gif",),
    "image/heic": ("heic",),
    "image/heif": ("heif",),
    "image/tiff": ("tif", "tiff"),
    "image/bmp": ("bmp",),
    "image/raw": RAW_EXTENSIONS,
    "video/mp4": ("mp4", "m4v"),
    "video/mov": ("mov", "qt"),
    "video/avi": ("avi",),
    "video/mkv": ("mkv",),
    "video/webm": ("webm",),
    "video/mpeg": ("mpg", "mpeg"),
    "audio": ("mp3", "wav", "flac", "aac", "ogg", "m4a"),
}


def normalize_type_key(key: str | None) -> str:
    return key.strip().lower() if key else ""


def parse_extension_list(raw: str | Iterable[str] | None) -> list[str]:
    """Split "jpg, .PNG" style input into clean lowercase extensions."""
    if not raw:
        return []
    parts = raw.split(",") if isinstance(raw, str) else list(raw)
    return [p.strip().lower().lstrip(".") for p in parts if p and p.strip().lstrip(".")]


def active_extensions(type_key: str | None, custom: str | Iterable[str] | None) -> list[str]:
    """Extensions for a preset type, else the custom list, else none (no filter)."""
    preset = FILE_TYPE_EXTENSIONS.get(normalize_type_key(type_key))
    if preset:
        return list(preset)
    return parse_extension_list(custom)


def filter_by_extension(assets: Sequence[Asset], extensions: Sequence[str]) -> list[Asset]:
    """Keep assets whose extension is in `extensions`; all of them if empty."""
    if not extensions:
        return list(assets)
    allowed = {e.lower() for e in extensions}
    return [a for a in assets if a.ext and a.ext.lower().lstrip(".") in allowed]
