from __future__ import annotations

from typing import Optional

# load averages are reported with two decimals
LOAD_PRECISION = 2


def accepts(load: float, requested_weight: int, limit: int) -> bool:
  """
  Decide whether a host at ``load`` can take ``requested_weight`` more work.

  Accepts iff ``load + requested_weight <= limit``.  The boundary is
  inclusive, and the sum is rounded to the load-average precision first so
  that float noise in the sample never rejects an exact tie.
  """
  return round(float(load) + int(requested_weight), LOAD_PRECISION) <= limit


def effective_limit(capacity: int, global_limit: Optional[int] = None) -> int:
  """Return the concurrency limit for a slot group, capped by ``global_limit``."""
  if global_limit is None:
    return capacity
  return min(capacity, global_limit)
