"""PDF writer that emits one page per stored image.

Stored images are already canonical JPEGs, so their bytes are embedded as-is
(DCTDecode streams) without being decoded or compressed again. The document
is written object by object to any binary sink exposing `write`, so a sink
can observe the document growing while it is produced.
"""

from __future__ import annotations

from typing import BinaryIO, Sequence, Tuple

import img2pdf

from models.session_models import StoredImage

POINTS_PER_INCH = 72.0


class PdfDocumentWriter:
    """Write stored images into a paginated PDF.

    Every page is sized from its image's pixel dimensions using one fixed
    ratio: `points = pixels * 72 / page_dpi`. The image fills the page.

    Args:
        page_dpi: Pixel density used to convert pixels to page points.
    """

    def __init__(self, page_dpi: float = 150.0) -> None:
        if page_dpi <= 0:
            raise ValueError("page_dpi must be positive")
        self.page_dpi = float(page_dpi)

    def page_size(self, image: StoredImage) -> Tuple[float, float]:
        """Return the (width, height) in points of the page holding `image`."""
        return self._points(image.width), self._points(image.height)

    def _points(self, pixels: float) -> float:
        return pixels * POINTS_PER_INCH / self.page_dpi

    def _layout(self, width_px, height_px, ndpi):
        # Embedded resolution metadata is ignored; every page uses page_dpi.
        width, height = self._points(width_px), self._points(height_px)
        return width, height, width, height

    def write(self, images: Sequence[StoredImage], sink: BinaryIO) -> int:
        """Write `images` to `sink` in order and return the number of pages.

        Raises:
            ValueError: If `images` is empty.
        """
        if not images:
            raise ValueError("At least one image is required to write a document.")

        img2pdf.convert(
            [image.content for image in images],
            layout_fun=self._layout,
            outputstream=sink,
            engine=img2pdf.Engine.internal,
        )
        return len(images)
