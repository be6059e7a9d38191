"""
Exception hierarchy for the dispatcher.

Only the command-line layer turns these into exit statuses; everything below
it raises and lets the caller decide.
"""

from __future__ import annotations


class SlotDispatchError(Exception):
  """Base class for dispatcher failures."""


class ConfigError(SlotDispatchError, ValueError):
  """Malformed or missing host-pool, palette or limit configuration."""


class UsageError(SlotDispatchError):
  """Bad command-line invocation."""


class SampleError(SlotDispatchError, RuntimeError):
  """The load of a single host could not be determined."""

  def __init__(self, host: str, reason: str) -> None:
    super().__init__(f"{host}: {reason}")
    self.host = host
    self.reason = reason


class TransportError(SlotDispatchError, RuntimeError):
  """The remote shell could not be started for an execution."""
