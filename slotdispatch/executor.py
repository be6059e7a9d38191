"""
Run the dispatched command on the chosen host.

Local commands go through ``/bin/sh`` in the current directory.  Remote
commands are shipped as a single script argument to the remote shell; the
script sources the site environment file unless the marker variable is
already set, changes to the same directory path as the caller and runs the
command.  Standard output and standard error are merged and streamed through
the colorizer line by line.
"""

from __future__ import annotations

import os
import shlex
import subprocess
import sys
from typing import IO, List, Optional, Sequence

from slotdispatch.colorizer import colorize
from slotdispatch.errors import TransportError


def build_remote_script(
  command: str,
  cwd: str,
  env_file: Optional[str] = None,
  env_marker: Optional[str] = None,
) -> str:
  """
  Compose the shell script executed on the remote host.

  The bootstrap stage discards its own errors; the directory change and the
  command are chained with ``&&`` so the remote status reflects whichever
  of them failed.
  """
  stages: List[str] = []
  if env_file:
    source = f". {shlex.quote(env_file)} >/dev/null 2>&1"
    if env_marker:
      source = f'[ -n "${{{env_marker}:-}}" ] || {source}'
    stages.append(f"{{ {source}; }}")
  stages.append(f"cd {shlex.quote(cwd)} && {command}")
  return '; '.join(stages)


def _exit_status(returncode: int) -> int:
  # killed by a signal: report it the way a shell would
  if returncode < 0:
    return 128 - returncode
  return returncode


class Executor:
  """
  Execute a command locally or through a remote shell.

  Parameters
  ----------
  remote_shell:
      Argument vector of the remote shell used for non-local hosts.
  env_file:
      Environment initialisation file sourced on the remote side, if any.
  env_marker:
      Variable whose presence on the remote side skips the bootstrap.
  stream:
      Text stream receiving the announcement and the command output.
  cwd:
      Working directory for the command.  Defaults to the caller's.
  """

  def __init__(
    self,
    remote_shell: Sequence[str],
    *,
    env_file: Optional[str] = None,
    env_marker: Optional[str] = None,
    stream: Optional[IO[str]] = None,
    cwd: Optional[str] = None,
  ) -> None:
    self._remote_shell = list(remote_shell)
    self._env_file = env_file
    self._env_marker = env_marker
    self._stream = stream
    self._cwd = cwd

  @property
  def stream(self) -> IO[str]:
    return self._stream if self._stream is not None else sys.stdout

  @property
  def cwd(self) -> str:
    return self._cwd if self._cwd is not None else os.getcwd()

  def announce(self, host: str, command: str) -> None:
    print(f"Machine:{host} Starting:{command}", file=self.stream, flush=True)

  def execute(self, command: str, host: str, is_local: bool, color: Optional[str] = None) -> int:
    """Run ``command`` on ``host`` and return its exit status."""
    self.announce(host, command)
    if is_local:
      process = self._start_local(command)
    else:
      process = self._start_remote(command, host)

    stream = self.stream
    with process:
      for chunk in colorize(process.stdout, color):
        stream.write(chunk)
        stream.flush()
      returncode = process.wait()
    return _exit_status(returncode)

  def _start_local(self, command: str) -> subprocess.Popen:
    return subprocess.Popen(
      command,
      shell=True,
      cwd=self.cwd,
      stdin=subprocess.DEVNULL,
      stdout=subprocess.PIPE,
      stderr=subprocess.STDOUT,
      text=True,
      errors='replace',
    )

  def _start_remote(self, command: str, host: str) -> subprocess.Popen:
    script = build_remote_script(command, self.cwd, self._env_file, self._env_marker)
    try:
      return subprocess.Popen(
        [*self._remote_shell, host, script],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        errors='replace',
      )
    except OSError as exc:
      raise TransportError(f"cannot start {self._remote_shell[0]} for {host}: {exc}") from exc
