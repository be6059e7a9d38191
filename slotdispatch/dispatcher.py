"""
The slot-acquisition loop.

Each dispatcher process owns one command.  The loop walks the host pool,
samples every slot group's load and hands the command to the executor on the
first group that admits it.  A pass without an admission is followed by a
fixed backoff before the next pass starts from the first group again.

Nothing is reserved between the sample and the start of the command, so two
processes that sample the same quiet host can both dispatch to it.
"""

from __future__ import annotations

from dataclasses import dataclass
import threading
from typing import Callable, List, Optional, Protocol, Sequence

from slotdispatch.admission import accepts, effective_limit
from slotdispatch.colorizer import color_for
from slotdispatch.errors import SampleError
from slotdispatch.pool import SlotGroup
from slotdispatch.sampler import ProbeResult


@dataclass(frozen=True)
class DispatchRequest:
  """The command a dispatcher process has to place, and its weight."""

  command: str
  requested_weight: int = 1
  global_limit: Optional[int] = None

  def __post_init__(self) -> None:
    if not self.command.strip():
      raise ValueError("command must be non-empty")
    object.__setattr__(self, "requested_weight", int(self.requested_weight))
    if self.requested_weight < 1:
      raise ValueError("requested_weight must be at least 1")
    if self.global_limit is not None:
      object.__setattr__(self, "global_limit", int(self.global_limit))


@dataclass(frozen=True)
class DispatchOutcome:
  """Result of a successful dispatch."""

  host: str
  exit_status: int
  color: Optional[str] = None


class Sampler(Protocol):
  def probe(self, host: str) -> ProbeResult: ...

  def is_local_host(self, host: str) -> bool: ...


class CommandExecutor(Protocol):
  def execute(self, command: str, host: str, is_local: bool, color: Optional[str] = None) -> int: ...


class DispatchLoop:
  """
  Drive the pool scan until a slot group accepts the request.

  Parameters
  ----------
  pool:
      Slot groups in scan order.
  palette:
      Colors handed out one per visited pool entry.  The index keeps
      rotating across passes.
  request:
      The command and its requested weight.
  sampler:
      Object providing ``probe(host)`` and ``is_local_host(host)``.
  executor:
      Object providing ``execute(command, host, is_local, color)``.
  backoff:
      Seconds to wait after a pass without an admission.
  log:
      Callable receiving per-probe trace messages.  Silent when omitted.
  """

  def __init__(
    self,
    pool: Sequence[SlotGroup],
    palette: Sequence[str],
    request: DispatchRequest,
    sampler: Sampler,
    executor: CommandExecutor,
    *,
    backoff: float = 1.0,
    log: Optional[Callable[[str], None]] = None,
  ) -> None:
    if not pool:
      raise ValueError("pool must contain at least one slot group")
    if backoff < 0:
      raise ValueError("backoff must be non-negative")
    self._pool: List[SlotGroup] = list(pool)
    self._palette: List[str] = list(palette)
    self._request = request
    self._sampler = sampler
    self._executor = executor
    self._backoff = float(backoff)
    self._log = log
    self.color_index = 0
    self.visits = 0
    self.passes = 0
    self.outcome: Optional[DispatchOutcome] = None

  def _trace(self, message: str) -> None:
    if self._log is not None:
      self._log(message)

  def _next_color(self) -> Optional[str]:
    color = color_for(self._palette, self.color_index)
    self.color_index = (self.color_index + 1) % max(1, len(self._palette))
    return color

  def limit_for(self, group: SlotGroup) -> int:
    return effective_limit(group.capacity, self._request.global_limit)

  def admissible(self) -> bool:
    """Return False when the request exceeds every slot group's limit."""
    weight = self._request.requested_weight
    return any(weight <= self.limit_for(group) for group in self._pool)

  def try_group(self, group: SlotGroup) -> Optional[DispatchOutcome]:
    """Visit one slot group: sample, decide, and execute on acceptance."""
    color = self._next_color()
    self.visits += 1
    try:
      result = self._sampler.probe(group.host)
    except SampleError as exc:
      self._trace(f"{group.host} unavailable ({exc.reason})")
      return None
    load = result.load

    limit = self.limit_for(group)
    if not accepts(load, self._request.requested_weight, limit):
      self._trace(f"{group.host} busy (load {load:.2f} + {self._request.requested_weight} > {limit})")
      return None

    self._trace(f"{group.host} accepted (load {load:.2f}, limit {limit})")
    status = self._executor.execute(
      self._request.command,
      result.host,
      self._sampler.is_local_host(result.host),
      color,
    )
    return DispatchOutcome(host=result.host, exit_status=status, color=color)

  def run_pass(self) -> Optional[DispatchOutcome]:
    for group in self._pool:
      outcome = self.try_group(group)
      if outcome is not None:
        return outcome
    self.passes += 1
    return None

  def run(self, stop: Optional[threading.Event] = None) -> Optional[DispatchOutcome]:
    """
    Scan until a slot is claimed.

    Returns the outcome of the single dispatch.  Only a set ``stop`` event
    ends the loop without one, in which case ``None`` is returned.
    """
    if self.outcome is not None:
      raise RuntimeError("this dispatch loop has already placed its command")
    stop = stop if stop is not None else threading.Event()

    while not stop.is_set():
      outcome = self.run_pass()
      if outcome is not None:
        self.outcome = outcome
        return outcome
      self._trace(f"pass {self.passes} found no free slot; retrying in {self._backoff:g}s")
      if stop.wait(self._backoff):
        break
    return None
