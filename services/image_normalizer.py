"""Image normalizer service.

Turns arbitrary uploaded image bytes into the canonical representation kept in
sessions: an EXIF-oriented RGB baseline JPEG, along with its pixel size.

Public class: `ImageNormalizer`

Example:
    normalizer = ImageNormalizer(quality=90)
    stored = normalizer.normalize(raw_bytes)
"""
from __future__ import annotations

import io
from typing import Tuple

from PIL import Image, ImageOps

from models.session_models import StoredImage


class ImageNormalizer:
    """Re-encode uploaded images to a single canonical JPEG format.

    Args:
        quality: JPEG quality used for the canonical re-encode. Defaults to 90.
        background: Color used to flatten transparent images. Defaults to white.
    """

    def __init__(self, quality: int = 90, background: Tuple[int, int, int] | None = None):
        if not 1 <= quality <= 95:
            raise ValueError("JPEG quality must be between 1 and 95")
        self.quality = quality
        self.background = background or (255, 255, 255)

    def normalize(self, data: bytes) -> StoredImage:
        """Decode, auto-orient and re-encode image bytes.

        Args:
            data: Raw bytes of the uploaded file.

        Returns:
            A `StoredImage` holding JPEG bytes and their pixel dimensions.

        Raises:
            ValueError: If the bytes are empty or not a decodable image.
        """
        if not data:
            raise ValueError("Image bytes are required for normalization.")

        try:
            with Image.open(io.BytesIO(data)) as src:
                src.load()
                oriented = ImageOps.exif_transpose(src)
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as exc:
            raise ValueError("Decoded bytes are not a supported image format") from exc

        rgb = self._flatten(oriented)

        out_io = io.BytesIO()
        rgb.save(out_io, format="JPEG", quality=self.quality)
        return StoredImage(content=out_io.getvalue(), width=rgb.width, height=rgb.height)

    def _flatten(self, image: Image.Image) -> Image.Image:
        """Return an RGB copy, compositing any alpha channel onto the background."""
        if image.mode == "RGB":
            return image
        if image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            background = Image.new("RGB", rgba.size, self.background)
            background.paste(rgba, mask=rgba.split()[3])
            return background
        return image.convert("RGB")
