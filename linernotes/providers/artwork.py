# pyright: reportUnknownMemberType=false

import io
import logging

from PIL import Image, UnidentifiedImageError
from PySide6.QtGui import QImage

from linernotes.providers.http import ProviderError, request
from linernotes.providers.itunes import search_song


ARTWORK_SIZE_TOKEN = "100x100bb"
ARTWORK_HD_SIZE_TOKEN = "600x600bb"

log = logging.getLogger(__name__)


def decode_image(data: bytes) -> QImage:
    """Decodes raw image bytes into a QImage that owns its pixel buffer."""

    try:
        with Image.open(io.BytesIO(data)) as img:
            img = img.convert("RGBA")
            q_image = QImage(img.tobytes(), img.width, img.height, QImage.Format.Format_RGBA8888)
            return q_image.copy()
    except (UnidentifiedImageError, OSError) as e:
        raise ProviderError(f"Artwork could not be decoded: {e}") from e


def fetch_artwork(title: str, artist: str) -> QImage | None:
    hit = search_song(title, artist)
    artwork_url = hit.get("artworkUrl100") if hit else None
    if not artwork_url:
        log.info(f"[artwork] nothing found for «{title}» by {artist}")
        return None

    data = request("GET", artwork_url.replace(ARTWORK_SIZE_TOKEN, ARTWORK_HD_SIZE_TOKEN)).content
    if not data:
        return None

    return decode_image(data)
