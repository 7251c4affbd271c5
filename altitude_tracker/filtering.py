"""
Sample Filtering for Altitude Tracking

Coarse, low-confidence fixes corrupt elevation deltas more than omitting
them, so fixes are accepted or rejected on horizontal accuracy. Fixes
carrying NaN or infinite values are not measurements and are dropped too.
"""

import logging
import math
from .constants import MAX_HORIZONTAL_ACCURACY_M
from .models import RawFix

logger = logging.getLogger(__name__)


def is_finite_fix(fix: RawFix) -> bool:
    return all(
        math.isfinite(value)
        for value in (
            fix.latitude,
            fix.longitude,
            fix.altitude,
            fix.horizontal_accuracy,
            fix.vertical_accuracy,
            fix.speed,
        )
    )


def accept(fix: RawFix) -> bool:
    """
    Decide whether a raw fix is good enough to be fused.
    
    Args:
        fix: Raw position fix.
        
    Returns:
        False if any value is NaN or infinite, the fix has no valid
        horizontal accuracy (negative), or the accuracy is
        MAX_HORIZONTAL_ACCURACY_M meters or worse. True otherwise.
    """
    if not is_finite_fix(fix):
        logger.warning("Rejected fix at %s: non-finite value", fix.timestamp)
        return False
    if not fix.horizontal_accuracy_valid:
        logger.debug("Rejected fix at %s: no horizontal accuracy", fix.timestamp)
        return False
    if fix.horizontal_accuracy >= MAX_HORIZONTAL_ACCURACY_M:
        logger.debug(
            "Rejected fix at %s: accuracy %.1fm >= %.1fm",
            fix.timestamp, fix.horizontal_accuracy, MAX_HORIZONTAL_ACCURACY_M,
        )
        return False
    return True
