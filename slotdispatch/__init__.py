"""
Load-balancing front end for a parallel build farm.

Each ``slotdispatch`` process owns one command, waits for a host in the pool
whose load leaves room for it, runs it there and exits with its status.
"""

from __future__ import annotations

from .admission import accepts, effective_limit
from .colorizer import color_for, colorize, parse_palette
from .config import DispatchConfig, resolve_pool
from .dispatcher import DispatchLoop, DispatchOutcome, DispatchRequest
from .errors import (
  ConfigError,
  SampleError,
  SlotDispatchError,
  TransportError,
  UsageError,
)
from .executor import Executor, build_remote_script
from .pool import SlotGroup, parse_pool, total_slots
from .sampler import LoadSampler, ProbeResult, parse_load_average

__version__ = '0.1'

__all__ = [
  "accepts",
  "effective_limit",
  "color_for",
  "colorize",
  "parse_palette",
  "DispatchConfig",
  "resolve_pool",
  "DispatchLoop",
  "DispatchOutcome",
  "DispatchRequest",
  "ConfigError",
  "SampleError",
  "SlotDispatchError",
  "TransportError",
  "UsageError",
  "Executor",
  "build_remote_script",
  "SlotGroup",
  "parse_pool",
  "total_slots",
  "LoadSampler",
  "ProbeResult",
  "parse_load_average",
]
