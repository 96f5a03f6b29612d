"""Persistence bridge for the fields that survive a reload.

Only two slots are persisted, the subject image and the product brief. They
live in a single JSON document (``config.store_path``)::

    {"subjectImage": "data:image/png;base64,...", "productBrief": "..."}

The bridge is best effort in both directions:

- a missing, unreadable or malformed document loads as empty defaults
- a failed write is logged at WARNING and otherwise ignored

Writes happen on every change of either field, so each save is a
read-modify-write of the whole document that leaves the other slot alone.
"""

import json
import logging
from pathlib import Path
from typing import Any

from .models import PersistedFields

logger = logging.getLogger(__name__)

SUBJECT_IMAGE_KEY = "subjectImage"
PRODUCT_BRIEF_KEY = "productBrief"


class PersistenceBridge:
    """Durable key/value storage for the persisted session slots.

    Attributes
    ----------
    path : Path
        JSON document backing the two slots
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, encoding="utf-8") as handle:
                data = json.load(handle)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read session store {self.path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Session store {self.path} is not a JSON object, ignoring it")
            return {}
        return data

    def _write(self, key: str, value: Any) -> None:
        data = self._read()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as handle:
                json.dump(data, handle)
        except (OSError, TypeError, ValueError) as e:
            logger.warning(f"Could not persist {key} to {self.path}: {e}")

    def load(self) -> PersistedFields:
        """Load persisted slots, falling back to empty defaults.

        Returns:
            PersistedFields (never raises)
        """
        data = self._read()

        subject_image = data.get(SUBJECT_IMAGE_KEY)
        if not isinstance(subject_image, str) or not subject_image:
            subject_image = None

        product_brief = data.get(PRODUCT_BRIEF_KEY)
        if not isinstance(product_brief, str):
            product_brief = ""

        logger.debug(
            f"Loaded session store (subject={'yes' if subject_image else 'no'}, "
            f"brief={len(product_brief)} chars)"
        )
        return PersistedFields(subject_image=subject_image, product_brief=product_brief)

    def save_subject_image(self, image: str | None) -> None:
        self._write(SUBJECT_IMAGE_KEY, image)

    def save_product_brief(self, brief: str) -> None:
        self._write(PRODUCT_BRIEF_KEY, brief)
