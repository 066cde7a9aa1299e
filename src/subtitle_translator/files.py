"""Subtitle file reading, validation, discovery and saving."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .config import MAX_FILE_SIZE, SUPPORTED_EXTENSIONS
from .models import RawDocument

logger = logging.getLogger(__name__)


def read_subtitle_file(path: Path) -> RawDocument:
    """
    Read a subtitle file into a RawDocument.

    UTF-8 (with or without BOM) is tried first, then GBK and Latin-1 for
    legacy files.
    """
    data = path.read_bytes()
    for encoding in ("utf-8-sig", "gbk"):
        try:
            return RawDocument.from_text(data.decode(encoding))
        except UnicodeDecodeError:
            logger.debug(f"{path.name} is not {encoding}")
    return RawDocument.from_text(data.decode("latin-1"))


def validate_subtitle_file(path: Path) -> Optional[str]:
    """
    Validate subtitle file before processing.

    Args:
        path: Path to subtitle file

    Returns:
        Error message if invalid, None if valid
    """
    if not path.exists():
        return f"File not found: {path}"

    if not path.is_file():
        return f"Not a file: {path}"

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        expected = ", ".join(sorted(SUPPORTED_EXTENSIONS))
        return f"Invalid file extension: {suffix} (expected one of {expected})"

    # 检查文件大小
    size = path.stat().st_size
    if size == 0:
        return "File is empty"
    if size > MAX_FILE_SIZE:
        return f"File too large: {size / 1024 / 1024:.1f}MB (max {MAX_FILE_SIZE // 1024 // 1024}MB)"

    return None


def find_subtitle_files(path: Path) -> List[Path]:
    """Return the subtitle files under ``path`` (or ``path`` itself), sorted."""
    if path.is_file():
        return [path]
    return sorted(
        p for p in path.rglob("*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS
    )


def save_subtitle(content: str, path: Path) -> None:
    """
    Save subtitle text to a file.

    Args:
        content: Subtitle document text
        path: Output file path
    """
    # 确保父目录存在
    path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(content)

    logger.info(f"Saved {path}")
