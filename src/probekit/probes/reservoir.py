"""
Reservoir sampling for sampler probes.

Sampler probes keep a statistically even sample of the documents they match
during an interval, without knowing in advance how many documents will come:
every document seen during the window has the same probability
``sample_size / count`` of being part of the sample when it is flushed.
"""

import logging
import random
from typing import Any, Dict, List, Optional

from ..models.measures import SamplerMeasure

logger = logging.getLogger(__name__)


class ReservoirSampler:
    """
    Fixed-size reservoir sampling (Algorithm R).

    A single Mersenne Twister generator is seeded once, when the sampler is
    created, and shared by every sampler probe. ``randrange`` draws by
    rejection, so positions are not biased the way a modulo would bias them.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Args:
            seed: Seed for reproducible samples. None seeds from the OS.
        """
        self._random = random.Random(seed)

    def offer(self, measure: SamplerMeasure, sample_size: int, record: Dict[str, Any]) -> bool:
        """
        Offer a collected record to a sampler measure.

        Returns:
            True if the record entered the sample
        """
        measure.count += 1

        # the sample fills up first
        if len(measure.content) < sample_size:
            measure.content.append(record)
            return True

        # then records replace sampled ones with a decreasing probability
        position = self._random.randrange(measure.count)
        if position < sample_size:
            measure.content[position] = record
            return True

        return False

    def merge(
        self,
        measure: SamplerMeasure,
        count: int,
        content: List[Dict[str, Any]],
        sample_size: int
    ) -> None:
        """
        Fold a detached reservoir back into a live one.

        Used when a flush fails: the sample taken out of the measure is put
        back so that the next flush covers both windows. Each slot of the
        merged sample comes from one side with a probability proportional to
        the number of documents that side has seen.

        Args:
            measure: Live measure, updated in place
            count: Number of documents seen by the detached reservoir
            content: Detached sample
            sample_size: Probe sample size
        """
        if measure.count == 0 and not measure.content:
            measure.count = count
            measure.content = list(content)
            return

        left_n, left = measure.count, list(measure.content)
        right_n, right = count, list(content)
        self._random.shuffle(left)
        self._random.shuffle(right)

        merged: List[Dict[str, Any]] = []
        while len(merged) < sample_size and (left or right):
            take_left = bool(left) and (
                not right or self._random.randrange(left_n + right_n) < left_n
            )
            if take_left:
                merged.append(left.pop())
                left_n -= 1
            else:
                merged.append(right.pop())
                right_n -= 1

        measure.count += count
        measure.content = merged
        logger.debug(f"Merged reservoirs into a sample of {len(merged)} out of {measure.count}")
