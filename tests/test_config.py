from __future__ import annotations

import pytest

from slotdispatch.config import DispatchConfig, resolve_pool
from slotdispatch.errors import ConfigError
from slotdispatch.pool import SlotGroup


def test_from_environ_defaults_to_current_host() -> None:
  config = DispatchConfig.from_environ({}, fallback_host="buildhost")
  assert config.pool == (SlotGroup("buildhost", 1),)
  assert config.palette == ()
  assert config.global_limit is None
  assert config.remote_shell == ("ssh", "-x")
  assert config.env_file is None
  assert config.env_marker == "SLOTDISPATCH_ENV"
  assert config.backoff == 1.0


def test_from_environ_reads_all_settings() -> None:
  environ = {
    "SLOTDISPATCH_HOSTS": "a:2 b",
    "SLOTDISPATCH_COLORS": "red blue",
    "SLOTDISPATCH_MAXLOAD": "6",
    "SLOTDISPATCH_RSH": "rsh -l builder",
    "SLOTDISPATCH_HOME": "/opt/farm",
    "SLOTDISPATCH_ENV_MARKER": "FARM_READY",
    "SLOTDISPATCH_BACKOFF": "0.25",
  }
  config = DispatchConfig.from_environ(environ)
  assert config.pool == (SlotGroup("a", 2), SlotGroup("b", 1))
  assert config.palette == ("red", "blue")
  assert config.global_limit == 6
  assert config.remote_shell == ("rsh", "-l", "builder")
  assert config.env_file == "/opt/farm/etc/slotdispatch.sh"
  assert config.env_marker == "FARM_READY"
  assert config.backoff == 0.25


def test_explicit_env_file_wins_over_install_hint() -> None:
  environ = {"SLOTDISPATCH_HOME": "/opt/farm", "SLOTDISPATCH_ENV_FILE": "/etc/farm.sh"}
  assert DispatchConfig.from_environ(environ, fallback_host="h").env_file == "/etc/farm.sh"


@pytest.mark.parametrize(
  "name, value",
  [
    ("SLOTDISPATCH_MAXLOAD", "many"),
    ("SLOTDISPATCH_MAXLOAD", "0"),
    ("SLOTDISPATCH_BACKOFF", "-1"),
    ("SLOTDISPATCH_COLORS", "red chartreuse"),
    ("SLOTDISPATCH_RSH", "ssh 'unterminated"),
  ],
)
def test_from_environ_rejects_malformed_values(name: str, value: str) -> None:
  with pytest.raises(ConfigError):
    DispatchConfig.from_environ({name: value}, fallback_host="h")


def test_resolve_pool_uses_explicit_hosts() -> None:
  assert resolve_pool({"SLOTDISPATCH_HOSTS": "x:3"}) == [SlotGroup("x", 3)]


def test_resolve_pool_ignores_batch_allocation_variables() -> None:
  environ = {"SLURM_NODELIST": "node[1-4]", "SLURM_JOB_CPUS_PER_NODE": "8(x4)"}
  assert resolve_pool(environ, fallback_host="buildhost") == [SlotGroup("buildhost", 1)]
