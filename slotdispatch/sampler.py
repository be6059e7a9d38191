"""
Load sampling for slot groups.

The local host is sampled through ``psutil``; remote hosts are asked for
their ``uptime`` over the configured remote shell and the first figure after
the ``load average`` marker is taken.  Samples are never cached, since loads
change between passes.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
import socket
import subprocess
from typing import Iterable, Optional, Sequence, Set

import psutil

from slotdispatch.constants import LOCAL_ALIASES, REMOTE_LOAD_COMMAND
from slotdispatch.errors import SampleError

_LOAD_PATTERN = re.compile(r'average[^0-9]*?(\d+(?:\.\d*)?|\.\d+)', re.IGNORECASE)


@dataclass(frozen=True)
class ProbeResult:
  host: str
  load: float


def parse_load_average(text: str) -> float:
  """
  Return the first number following an ``average`` marker in ``text``.

  Handles both ``load average: 0.52, 0.58, 0.59`` and the BSD
  ``load averages: 1.20 1.31 1.40`` forms.
  """
  match = _LOAD_PATTERN.search(text or '')
  if match is None:
    raise ValueError(f"no load average in {text!r}")
  return float(match.group(1))


def local_host_names() -> Set[str]:
  hostname = socket.gethostname()
  names = {hostname, hostname.split('.', 1)[0], socket.getfqdn()}
  return names | set(LOCAL_ALIASES)


class LoadSampler:
  """
  Sample the short-term load average of a host.

  Parameters
  ----------
  remote_shell:
      Argument vector of the remote shell, e.g. ``['ssh', '-x']``.  The host
      and the remote command are appended to it.
  local_names:
      Names that refer to this machine.  Detected from :mod:`socket` when
      omitted.
  """

  def __init__(
    self,
    remote_shell: Sequence[str],
    local_names: Optional[Iterable[str]] = None,
  ) -> None:
    if not remote_shell:
      raise ValueError("remote_shell must name a command")
    self._remote_shell = list(remote_shell)
    self._local_names = set(local_names) if local_names is not None else local_host_names()

  def is_local_host(self, host: str) -> bool:
    return host in self._local_names

  def sample(self, host: str) -> float:
    if self.is_local_host(host):
      return self._sample_local()
    return self._sample_remote(host)

  def probe(self, host: str) -> ProbeResult:
    return ProbeResult(host=host, load=self.sample(host))

  def _sample_local(self) -> float:
    return float(psutil.getloadavg()[0])

  def _sample_remote(self, host: str) -> float:
    try:
      completed = subprocess.run(
        [*self._remote_shell, host, REMOTE_LOAD_COMMAND],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors='replace',
        check=False,
      )
    except OSError as exc:
      raise SampleError(host, f"cannot start {self._remote_shell[0]}: {exc}") from exc

    if completed.returncode != 0:
      detail = completed.stderr.strip().splitlines()
      reason = detail[-1] if detail else f"exit status {completed.returncode}"
      raise SampleError(host, reason)

    try:
      return parse_load_average(completed.stdout)
    except ValueError as exc:
      raise SampleError(host, str(exc)) from exc
