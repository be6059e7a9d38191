"""
Environment-driven configuration.

Settings are read once from the process environment (``SLOTDISPATCH_*``) and
frozen for the lifetime of the dispatcher.  The host pool defaults to
the current host with a single slot.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import shlex
import socket
from typing import List, Mapping, Optional, Tuple

import slotdispatch.constants as c
from slotdispatch.colorizer import parse_palette
from slotdispatch.errors import ConfigError
from slotdispatch.pool import SlotGroup, parse_pool


def _positive_int(environ: Mapping[str, str], name: str) -> Optional[int]:
  raw = environ.get(name, '').strip()
  if not raw:
    return None
  try:
    value = int(raw)
  except ValueError:
    raise ConfigError(f"{name} must be an integer, got {raw!r}") from None
  if value < 1:
    raise ConfigError(f"{name} must be at least 1, got {value}")
  return value


def _non_negative_float(environ: Mapping[str, str], name: str, default: float) -> float:
  raw = environ.get(name, '').strip()
  if not raw:
    return default
  try:
    value = float(raw)
  except ValueError:
    raise ConfigError(f"{name} must be a number, got {raw!r}") from None
  if value < 0:
    raise ConfigError(f"{name} must be non-negative, got {value}")
  return value


def _remote_shell(environ: Mapping[str, str]) -> Tuple[str, ...]:
  raw = environ.get(c.ENV_RSH, '').strip() or c.DEFAULT_RSH
  try:
    argv = shlex.split(raw)
  except ValueError as exc:
    raise ConfigError(f"{c.ENV_RSH} is not a valid command line: {exc}") from None
  if not argv:
    raise ConfigError(f"{c.ENV_RSH} is empty")
  return tuple(argv)


def _env_file(environ: Mapping[str, str]) -> Optional[str]:
  explicit = environ.get(c.ENV_FILE, '').strip()
  if explicit:
    return explicit
  home = environ.get(c.ENV_HOME, '').strip()
  if home:
    return os.path.join(home, c.ENV_FILE_RELPATH)
  return None


def resolve_pool(environ: Mapping[str, str], fallback_host: Optional[str] = None) -> List[SlotGroup]:
  """Parse ``SLOTDISPATCH_HOSTS``, defaulting to the current host with one slot."""
  spec = environ.get(c.ENV_HOSTS, '')
  if spec.strip():
    return parse_pool(spec)
  return parse_pool('', fallback_host=fallback_host or socket.gethostname())


@dataclass(frozen=True)
class DispatchConfig:
  """Frozen view of the dispatcher settings."""

  pool: Tuple[SlotGroup, ...]
  palette: Tuple[str, ...] = ()
  global_limit: Optional[int] = None
  remote_shell: Tuple[str, ...] = tuple(shlex.split(c.DEFAULT_RSH))
  env_file: Optional[str] = None
  env_marker: str = c.DEFAULT_MARKER
  backoff: float = c.DEFAULT_BACKOFF

  def __post_init__(self) -> None:
    if not self.pool:
      raise ConfigError("host pool must contain at least one slot group")
    object.__setattr__(self, "pool", tuple(self.pool))
    object.__setattr__(self, "palette", tuple(self.palette))
    object.__setattr__(self, "remote_shell", tuple(self.remote_shell))

  @classmethod
  def from_environ(
    cls,
    environ: Optional[Mapping[str, str]] = None,
    fallback_host: Optional[str] = None,
  ) -> "DispatchConfig":
    if environ is None:
      environ = os.environ
    return cls(
      pool=tuple(resolve_pool(environ, fallback_host)),
      palette=tuple(parse_palette(environ.get(c.ENV_COLORS))),
      global_limit=_positive_int(environ, c.ENV_MAXLOAD),
      remote_shell=_remote_shell(environ),
      env_file=_env_file(environ),
      env_marker=environ.get(c.ENV_MARKER, '').strip() or c.DEFAULT_MARKER,
      backoff=_non_negative_float(environ, c.ENV_BACKOFF, c.DEFAULT_BACKOFF),
    )
