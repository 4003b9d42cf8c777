"""
Sounds shipped inside the package

These sounds are not part of the remote catalog. The synchroniser never
deletes them and copies them into the sounds directory whenever they are
missing.
"""

import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from ..utils.helpers import ensure_directory
from ..utils.logger import get_logger

# Directory inside the package where the bundled sounds live
BUNDLED_SOUNDS_PATH = Path(__file__).resolve().parent.parent / "resources" / "bundled"

# Sounds that don't exist in the remote catalog
BUNDLED_SOUNDS = ("herewegoagain.wav", "useyourmidas.wav", "welost.wav")

logger = get_logger(__name__)


def is_bundled(file_name: str, bundled: Iterable[str] = BUNDLED_SOUNDS) -> bool:
    return file_name in bundled


def provision_bundled_sounds(
    destination: Path,
    source: Optional[Path] = None,
    bundled: Iterable[str] = BUNDLED_SOUNDS
) -> List[str]:
    """
    Copy bundled sounds that are missing from the sounds directory

    A bundled sound whose packaged resource is missing is skipped with a
    warning; existing files are never overwritten.

    Args:
        destination: Sounds directory
        source: Directory holding the packaged sounds (defaults to BUNDLED_SOUNDS_PATH)
        bundled: File names to provision

    Returns:
        File names that were copied
    """
    source = Path(source) if source is not None else BUNDLED_SOUNDS_PATH
    destination = ensure_directory(destination)

    copied = []
    for file_name in bundled:
        target = destination / file_name
        if target.exists():
            continue

        resource = source / file_name
        if not resource.is_file():
            logger.warning(f"Bundled sound missing from package: {file_name}")
            continue

        shutil.copyfile(resource, target)
        copied.append(file_name)
        logger.debug(f"Copied bundled sound: {file_name}")

    return copied
