"""24-bit BMP export of the committed canvas."""

import io
import logging

import numpy as np
from PIL import Image

from errors import ExportError

logger = logging.getLogger(__name__)

FILE_HEADER_SIZE = 14
INFO_HEADER_SIZE = 40


def encode_bmp(canvas) -> bytes:
    """
    Encodes the committed canvas as an uncompressed 24-bit bitmap.

    Rows are stored bottom-to-top in B, G, R order and padded to four bytes;
    alpha is dropped. The resolution fields are written as zero.
    """
    rgb = np.ascontiguousarray(canvas.buffer[..., :3])
    img = Image.fromarray(rgb)
    out = io.BytesIO()
    img.save(out, format="BMP", dpi=(0, 0))
    return out.getvalue()


def export_bmp(canvas, path) -> int:
    """Writes the canvas to ``path`` as BMP and returns the number of bytes written."""
    try:
        data = encode_bmp(canvas)
    except MemoryError as e:
        raise ExportError("cannot allocate memory.") from e
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise ExportError(f"cannot open {path}.") from e
    logger.debug("wrote %d bytes of bitmap to %s", len(data), path)
    return len(data)
