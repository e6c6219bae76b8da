"""Lighthouse processor: broad-market 5-minute volume."""

import logging
import math

from ..continuous.data_types import LighthouseSnapshot
from ..store import MetricsStore

logger = logging.getLogger(__name__)


class LighthouseProcessor:
    """Stores the all-protocols 5-minute total volume when one is present."""

    def __init__(self, store: MetricsStore):
        self.store = store

    def handle_lighthouse_snapshot(self, snapshot: LighthouseSnapshot) -> bool:
        """Returns True if the stored value was replaced."""
        value = snapshot.five_minute_total_volume
        if value is None or isinstance(value, bool) or not isinstance(value, (int, float)) \
                or not math.isfinite(value) or value < 0:
            logger.debug(f"Lighthouse snapshot without usable 5m volume: {value!r}")
            return False
        self.store.state.lighthouse_volume_5m = float(value)
        return True
