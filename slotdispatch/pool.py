"""
Host pool model for the dispatcher.

A pool is an ordered list of slot groups parsed from ``host[:count]`` tokens.
Order matters: the dispatch loop walks the pool front to back on every pass,
and a host may appear more than once to describe independent slot groups.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from slotdispatch.errors import ConfigError


@dataclass(frozen=True)
class SlotGroup:
  """
  A named host's declared concurrent-task capacity.

  Parameters
  ----------
  host:
      Host name as understood by the remote shell (or the local host).
  capacity:
      Number of concurrent tasks the host accepts.  Always at least 1.
  """

  host: str
  capacity: int = 1

  def __post_init__(self) -> None:
    if not self.host:
      raise ConfigError("slot group host must be non-empty")
    object.__setattr__(self, "capacity", int(self.capacity))
    if self.capacity < 1:
      raise ConfigError(f"capacity for {self.host} must be at least 1, got {self.capacity}")


def _parse_token(token: str) -> SlotGroup:
  host, sep, count = token.rpartition(':')
  if not sep or not host:
    # no colon, or a lone leading colon: the whole token is the host
    return SlotGroup(token, 1)
  if not count.isdigit():
    # ``host:`` counts as one slot; a non-numeric tail such as ``a:b`` keeps the whole token
    return SlotGroup(host if not count else token, 1)
  return SlotGroup(host, max(1, int(count)))


def parse_pool(spec: Optional[str], fallback_host: Optional[str] = None) -> List[SlotGroup]:
  """
  Parse a whitespace-separated ``host[:count]`` list into slot groups.

  A missing or empty count defaults to 1.  An empty spec yields a single
  slot group for ``fallback_host`` when one is given and raises
  :class:`ConfigError` otherwise.
  """
  tokens = (spec or '').split()
  if not tokens:
    if fallback_host:
      return [SlotGroup(fallback_host, 1)]
    raise ConfigError("host pool is empty and no fallback host was supplied")
  return [_parse_token(token) for token in tokens]


def total_slots(pool: Iterable[SlotGroup]) -> int:
  """Return the summed capacity of ``pool``."""
  return sum(group.capacity for group in pool)


def format_pool(pool: Iterable[SlotGroup]) -> str:
  return ' '.join(f"{group.host}:{group.capacity}" for group in pool)
