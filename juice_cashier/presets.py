"""Named drink presets stored as a single blob."""

from __future__ import annotations

import json
from typing import Iterable

from juice_cashier.app_logger import get_logger
from juice_cashier.config import PRESETS_BLOB_KEY
from juice_cashier.constant import DEFAULT_PRESETS
from juice_cashier.models import Drink, Preset
from juice_cashier.pricing import make_drink
from juice_cashier.storage import BlobStore, StorageError

logger = get_logger(__name__)


def default_presets() -> list[Preset]:
    return [Preset.from_dict(dict(raw)) for raw in DEFAULT_PRESETS]


def expand_preset(preset: Preset) -> Drink:
    """Turn a preset into a drink priced by the current rules."""
    return make_drink(preset.cup, preset.flavours, preset.add_ons)


class PresetStore:
    """Presets persisted under one blob key; every mutation rewrites the list.

    Defaults are seeded only when no blob exists (or it cannot be decoded),
    so an intentionally emptied list stays empty across restarts.
    """

    def __init__(self, blobs: BlobStore, key: str = PRESETS_BLOB_KEY) -> None:
        self.blobs = blobs
        self.key = key
        self._presets: list[Preset] = []
        self._load()

    @property
    def presets(self) -> tuple[Preset, ...]:
        return tuple(self._presets)

    def add(self, preset: Preset) -> None:
        self._presets.append(preset)
        self._save()

    def remove_at(self, indexes: Iterable[int]) -> None:
        doomed = {idx for idx in indexes if 0 <= idx < len(self._presets)}
        self._presets = [p for idx, p in enumerate(self._presets) if idx not in doomed]
        self._save()

    def replace_all(self, presets: Iterable[Preset]) -> None:
        self._presets = list(presets)
        self._save()

    def _load(self) -> None:
        try:
            raw = self.blobs.get(self.key)
        except StorageError:
            logger.warning("preset blob unreadable; seeding defaults", exc_info=True)
            raw = None

        if raw is not None:
            try:
                decoded = json.loads(raw.decode("utf-8"))
                if not isinstance(decoded, list):
                    raise TypeError(f"expected a list, got {type(decoded).__name__}")
                self._presets = [Preset.from_dict(item) for item in decoded]
                return
            except (KeyError, TypeError, ValueError, AttributeError):
                logger.warning("preset blob corrupt; seeding defaults", exc_info=True)

        self._presets = default_presets()
        logger.info("seeded %d default presets", len(self._presets))
        self._save()

    def _save(self) -> None:
        try:
            payload = json.dumps([preset.to_dict() for preset in self._presets], ensure_ascii=False)
            self.blobs.set(self.key, payload.encode("utf-8"))
        except (StorageError, TypeError, ValueError):
            logger.exception("persist failed for presets; keeping in-memory state")
