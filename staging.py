# staging.py
from typing import Optional, Tuple

from constants import STAGE_BANDS, StageInfo


class StageClassifier:
    """
    KDIGO 2024 GFR categories. Total over every integer: zero and negative
    values land in G5, plausibility is checked before we get here.
    """

    @staticmethod
    def classify(egfr: int) -> StageInfo:
        # First match wins, bands are ordered highest first
        for lower_bound, stage in STAGE_BANDS:
            if lower_bound is None or egfr >= lower_bound:
                return stage
        # Unreachable while the bottom band is a catch-all
        raise LookupError(f"No stage band for eGFR {egfr}")

    @staticmethod
    def bands() -> Tuple[Tuple[Optional[int], StageInfo], ...]:
        return STAGE_BANDS
