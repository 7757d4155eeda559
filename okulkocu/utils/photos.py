import logging
import re
from typing import Optional

from okulkocu.core.config import settings

logger = logging.getLogger(__name__)

# demo verisindeki dosya adı öneki -> placeholder avatar kategorisi
MOCK_PHOTO_PREFIXES = (
    ("ogrenci_", "children"),
    ("ogretmen_", "women"),
    ("admin_", "men"),
)


def _placeholder_url(base: str, category: str, filename: str) -> str:
    digits = re.sub(r"\D", "", filename)
    index = int(digits) % 100 if digits else 0
    return f"{base.rstrip('/')}/{category}/{index}.jpg"


def resolve_photo_url(
    filename: object,
    *,
    upload_base: Optional[str] = None,
    placeholder_base: Optional[str] = None,
    mock_photos: Optional[bool] = None,
) -> Optional[str]:
    if not isinstance(filename, str) or not filename.strip():
        return None

    name = filename.strip()
    use_mock = settings.mock_photos if mock_photos is None else mock_photos

    if use_mock:
        for prefix, category in MOCK_PHOTO_PREFIXES:
            if prefix in name:
                logger.debug("Mock photo %s -> placeholder (%s)", name, category)
                return _placeholder_url(placeholder_base or settings.placeholder_base_url, category, name)

    base = (upload_base or settings.upload_base_url).rstrip("/")
    return f"{base}/{name}"
