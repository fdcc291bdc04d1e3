"""
Running product totals.

Rebuilds the absolute product count at the close of each bucket from the
count that existed before the range plus each bucket's signed delta.
"""

from typing import List, Optional, Sequence, Tuple

import structlog

from exceptions import DataIntegrityError
from services.event_aggregator import InventoryCounts

logger = structlog.get_logger(__name__)


def reconstruct(
    baseline: Optional[int],
    deltas: Sequence[InventoryCounts],
) -> Tuple[List[int], int]:
    """
    Apply bucket deltas to a baseline in chronological order.

    Args:
        baseline: Active products created strictly before the range start
        deltas: Added/removed counts per bucket, oldest first

    Returns:
        Tuple of (total after each bucket, final total). The final total is
        the baseline when there are no buckets.

    Raises:
        DataIntegrityError: If the baseline is missing or negative
    """
    if baseline is None:
        raise DataIntegrityError("Baseline product count is unavailable")
    if baseline < 0:
        raise DataIntegrityError(
            "Baseline product count is negative",
            details={"baseline": baseline}
        )

    running = baseline
    totals: List[int] = []
    for counts in deltas:
        running += counts.added - counts.removed
        totals.append(running)

    if running < 0:
        # More removals than products: bad event data upstream
        logger.warning("running_total_negative", baseline=baseline, final_total=running)

    return totals, running
