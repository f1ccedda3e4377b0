# ABOUTME: Stable per-installation device identifier used to key reading progress.
# ABOUTME: Generated once, stored in a small file beside (not inside) the library database.

import logging
import uuid
from pathlib import Path

from novelshelf.db.connection import DEFAULT_DATA_DIR

logger = logging.getLogger(__name__)

DEFAULT_DEVICE_ID_PATH = DEFAULT_DATA_DIR / "device_id"


def get_device_id(path: Path | None = None) -> str:
    """Return this installation's device id, creating it on first use.

    The id is a random UUID4 hex string. A missing or blank file is replaced
    with a fresh id; an existing one is returned unchanged forever after.

    Args:
        path: Where the id lives. Defaults to ~/.novelshelf/device_id.
    """
    id_path = path or DEFAULT_DEVICE_ID_PATH

    if id_path.exists():
        device_id = id_path.read_text(encoding="utf-8").strip()
        if device_id:
            return device_id

    device_id = uuid.uuid4().hex
    id_path.parent.mkdir(parents=True, exist_ok=True)
    id_path.write_text(device_id + "\n", encoding="utf-8")
    logger.info("Created device id %s at %s", device_id, id_path)
    return device_id
