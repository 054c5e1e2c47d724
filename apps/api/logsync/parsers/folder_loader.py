"""
Folder loader - finds ingestible log files in a directory.

Also holds the extension rules shared by the archive extractor.
"""

from pathlib import Path
from typing import List, Union

from ..core.logging import get_logger

logger = get_logger(__name__)

# Plain logs and the containers we know how to open
SUPPORTED_EXTENSIONS = (".log", ".txt", ".zip", ".7z", ".gz")

ARCHIVE_EXTENSIONS = (".zip", ".7z", ".gz")

# Archive members with these endings are never parsed as text
SKIP_EXTENSIONS = (
    ".class", ".jar", ".war", ".ear", ".pyc",
    ".exe", ".dll", ".so",
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".ico", ".pdf",
    ".zip", ".7z", ".gz", ".tar", ".iso",
)

PathLike = Union[str, Path]


def is_supported_log_file(name: str) -> bool:
    """Check whether a file name is a plain log or a supported archive."""
    return name.lower().endswith(SUPPORTED_EXTENSIONS)


def should_skip_extension(name: str) -> bool:
    """Check whether an archive member is binary/nested content rather than a log."""
    return name.lower().endswith(SKIP_EXTENSIONS)


def is_archive(name: str) -> bool:
    return name.lower().endswith(ARCHIVE_EXTENSIONS)


def scan_directory(folder_path: PathLike) -> List[Path]:
    """
    List the ingestible files directly inside a folder.

    Not recursive; hidden files are skipped.

    Args:
        folder_path: Folder to scan

    Returns:
        Sorted list of paths to log files and archives
    """
    folder = Path(folder_path)
    if not folder.is_dir():
        logger.warning(f"Folder does not exist: {folder}")
        return []

    files = []
    skipped = 0
    for path in folder.iterdir():
        if path.name.startswith(".") or not path.is_file():
            continue
        if is_supported_log_file(path.name):
            files.append(path)
        else:
            skipped += 1

    if skipped:
        logger.debug(f"Ignored {skipped} unsupported files in {folder}")

    logger.info(f"Discovered {len(files)} log files in {folder}")
    return sorted(files)
