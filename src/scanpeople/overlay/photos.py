"""Photo cutouts used to render figures.

Photos live under a root directory with a ``manifest.json`` mapping
each lower-case role to its image files::

    {"student": ["student_01.png", "kid_01.png"], "teacher": ["teacher_01.png"]}

Each image is opened once with Pillow to measure its aspect ratio.
Container sizes are then chosen so that every adult renders at the
same height, teenagers slightly shorter and children noticeably
shorter, whatever the pixel size of the source image.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from ..utils.logging import get_logger

logger = get_logger(__name__)

TARGET_HEIGHT_RATIO = 2.0
"""Height-to-width ratio of a standing person's container."""

SILHOUETTE_HEIGHT_RATIO = 1.15

PHOTO_SCALES: Dict[str, float] = {
    "student/student_01.png": 0.92,
    "student/student_02.png": 0.93,
    "student/student_03.png": 0.91,
    "student/student_04.png": 0.94,
    "student/student_05.png": 0.90,
    "student/student_06.png": 0.92,
    "student/kid_01.png": 0.75,
    "student/kid_02.png": 0.73,
    "student/kid_03.png": 0.76,
    "student/kid_04.png": 0.74,
    "student/kid_05.png": 0.78,
    "student/kid_06.png": 0.72,
    "student/kid_07.png": 0.75,
}
"""Relative height per image; images not listed render at 1.0."""


@dataclass(frozen=True)
class ImageSize:
    width: int
    height: int

    @property
    def aspect(self) -> float:
        return self.height / self.width


class PhotoCatalog:
    """Manifest of photo cutouts with their measured sizes."""

    def __init__(self, root: Path, manifest: Optional[Dict[str, List[str]]] = None):
        self.root = Path(root)
        self.manifest: Dict[str, List[str]] = manifest or {}
        self.sizes: Dict[str, ImageSize] = {}

    @property
    def ready(self) -> bool:
        return bool(self.manifest)

    @classmethod
    def load(cls, root: Path) -> "PhotoCatalog":
        """Read the manifest under ``root`` and measure every listed image.

        A missing or unreadable manifest yields an empty catalog; an
        image that cannot be opened is skipped and falls back to the
        default aspect ratio.
        """
        catalog = cls(root)
        manifest_path = catalog.root / "manifest.json"
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                catalog.manifest = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Photo assets not available: %s", exc)
            return catalog

        for role, files in catalog.manifest.items():
            for file in files:
                key = f"{role}/{file}"
                try:
                    with Image.open(catalog.root / role / file) as img:
                        width, height = img.size
                except (OSError, UnidentifiedImageError) as exc:
                    logger.warning("Could not read photo %s: %s", key, exc)
                    continue
                catalog.sizes[key] = ImageSize(width, height)
        logger.info("Loaded %d photos for %d roles", len(catalog.sizes), len(catalog.manifest))
        return catalog

    def image_key(self, role: str, pose_index: int) -> Optional[str]:
        """``role/file`` chosen deterministically by pose index."""
        files = self.manifest.get(role.lower())
        if not files:
            return None
        return f"{role.lower()}/{files[pose_index % len(files)]}"

    def image_path(self, role: str, pose_index: int) -> Optional[Path]:
        key = self.image_key(role, pose_index)
        return self.root / key if key else None

    def container_size(self, role: str, pose_index: int, base_size: float) -> Tuple[int, int]:
        """Container ``(width, height)`` in pixels for a photo figure."""
        key = self.image_key(role, pose_index)
        if key is None:
            return (round(base_size), round(base_size * TARGET_HEIGHT_RATIO))
        image_scale = PHOTO_SCALES.get(key, 1.0)
        size = self.sizes.get(key)
        aspect = size.aspect if size else TARGET_HEIGHT_RATIO
        height = base_size * TARGET_HEIGHT_RATIO * image_scale
        return (round(height / aspect), round(height))


def silhouette_size(base_size: float) -> Tuple[int, int]:
    """Container size for drawn (non-photo) figures."""
    return (round(base_size), round(base_size * SILHOUETTE_HEIGHT_RATIO))
