from threading import RLock
from typing import Callable, Optional

from loguru import logger

from rental_pricing.core.penalty_calculator import apply_settings_update
from rental_pricing.schemas import PenaltySettings, PenaltySettingsUpdate


class PenaltySettingsStore:
    """In-memory holder of the singleton ``PenaltySettings``.

    The defaults factory is called on first read, so the store always hands
    out a settings object even before an admin has saved one.
    """

    def __init__(self, defaults: Callable[[], PenaltySettings] = PenaltySettings):
        self._defaults = defaults
        self._settings: Optional[PenaltySettings] = None
        self._lock = RLock()

    def get(self) -> PenaltySettings:
        with self._lock:
            if self._settings is None:
                self._settings = self._defaults()
                logger.info(f"Penalty settings initialised with defaults: {self._settings}")
            return self._settings

    def update(self, update: PenaltySettingsUpdate) -> PenaltySettings:
        with self._lock:
            self._settings = apply_settings_update(self.get(), update)
            logger.info(f"Penalty settings updated: {self._settings}")
            return self._settings
