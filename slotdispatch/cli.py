"""
Command-line entry point.

    slotdispatch [-help] [-v] [-np N] COMMAND...
    slotdispatch -count

Flags are only recognised before the first non-flag token; everything from
that token on is the command, joined with single spaces.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
import sys
from typing import List, Mapping, Optional, Sequence
import warnings

import slotdispatch.constants as c
from slotdispatch.config import DispatchConfig, resolve_pool
from slotdispatch.dispatcher import DispatchLoop, DispatchRequest
from slotdispatch.errors import TransportError, UsageError
from slotdispatch.executor import Executor
from slotdispatch.pool import format_pool, total_slots
from slotdispatch.sampler import LoadSampler

USAGE = f"""\
usage: slotdispatch [-help] [-v] [-np N] COMMAND...
       slotdispatch -count

Wait for a host in the pool with spare capacity and run COMMAND there.

  -np N     weight of the command in load units (default 1)
  -count    print the total number of slots in the pool and exit
  -v        trace every probe on standard error
  -help     show this message

environment:
  {c.ENV_HOSTS:<24} host[:count] list (default: this host, one slot)
  {c.ENV_COLORS:<24} colors cycled across pool entries
  {c.ENV_MAXLOAD:<24} global concurrency limit
  {c.ENV_RSH:<24} remote shell command (default: {c.DEFAULT_RSH})
  {c.ENV_HOME:<24} install location of the environment file
  {c.ENV_FILE:<24} environment file sourced on remote hosts
  {c.ENV_MARKER:<24} variable that marks an initialised environment
  {c.ENV_BACKOFF:<24} seconds between passes (default: {c.DEFAULT_BACKOFF:g})
"""


@dataclass(frozen=True)
class Invocation:
  command: str = ''
  requested_weight: int = 1
  count: bool = False
  help: bool = False
  verbose: bool = False


def parse_args(argv: Sequence[str]) -> Invocation:
  """Parse the argument vector (without the program name)."""
  args: List[str] = list(argv)
  weight = 1
  count = False
  verbose = False

  while args and args[0].startswith('-'):
    flag = args.pop(0)
    if flag in ('-help', '-h', '--help'):
      return Invocation(help=True)
    if flag == '-count':
      count = True
    elif flag == '-v':
      verbose = True
    elif flag == '-np':
      if not args:
        raise UsageError("-np requires a value")
      value = args.pop(0)
      try:
        weight = int(value)
      except ValueError:
        raise UsageError(f"-np expects an integer, got {value!r}") from None
      if weight < 1:
        raise UsageError(f"-np must be at least 1, got {weight}")
    else:
      raise UsageError(f"unknown option {flag}")

  if count:
    return Invocation(count=True, verbose=verbose)
  if not args:
    raise UsageError("no command given")
  return Invocation(command=' '.join(args), requested_weight=weight, verbose=verbose)


def _log(message: str) -> None:
  print(f"slotdispatch: {message}", file=sys.stderr, flush=True)


def build_loop(config: DispatchConfig, request: DispatchRequest, verbose: bool = False) -> DispatchLoop:
  sampler = LoadSampler(config.remote_shell)
  executor = Executor(
    config.remote_shell,
    env_file=config.env_file,
    env_marker=config.env_marker,
  )
  return DispatchLoop(
    config.pool,
    config.palette,
    request,
    sampler,
    executor,
    backoff=config.backoff,
    log=_log if verbose else None,
  )


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
  if argv is None:
    argv = sys.argv[1:]
  if environ is None:
    environ = os.environ

  try:
    invocation = parse_args(argv)
  except UsageError as exc:
    _log(str(exc))
    print(USAGE, file=sys.stderr, end='', flush=True)
    return c.USAGE_STATUS

  if invocation.help:
    print(USAGE, end='', flush=True)
    return 0

  try:
    if invocation.count:
      print(total_slots(resolve_pool(environ)), flush=True)
      return 0
    config = DispatchConfig.from_environ(environ)
    request = DispatchRequest(
      command=invocation.command,
      requested_weight=invocation.requested_weight,
      global_limit=config.global_limit,
    )
  except ValueError as exc:
    _log(str(exc))
    return c.USAGE_STATUS

  loop = build_loop(config, request, verbose=invocation.verbose)
  if invocation.verbose:
    _log(f"pool {format_pool(config.pool)}")
  if not loop.admissible():
    warnings.warn(
      f"a weight of {request.requested_weight} exceeds the limit of every slot group; "
      "no host will ever accept this command",
      RuntimeWarning,
      stacklevel=2,
    )

  try:
    outcome = loop.run()
  except TransportError as exc:
    _log(str(exc))
    return c.TRANSPORT_FAILURE_STATUS
  except KeyboardInterrupt:
    return 130

  if outcome is None:  # pragma: no cover - run() only returns None when stopped
    return c.USAGE_STATUS
  return outcome.exit_status


def run() -> None:
  sys.exit(main())
