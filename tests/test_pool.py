from __future__ import annotations

import pytest

from slotdispatch.errors import ConfigError
from slotdispatch.pool import SlotGroup, format_pool, parse_pool, total_slots


def test_parse_pool_defaults_missing_counts_to_one() -> None:
  pool = parse_pool("hostA:1 hostB:2 hostC")
  assert pool == [SlotGroup("hostA", 1), SlotGroup("hostB", 2), SlotGroup("hostC", 1)]


def test_parse_pool_empty_remainder_and_degenerate_tokens() -> None:
  pool = parse_pool("hostA: :3 fe80::1x")
  assert pool[0] == SlotGroup("hostA", 1)
  assert pool[1] == SlotGroup(":3", 1)
  assert pool[2] == SlotGroup("fe80::1x", 1)


def test_parse_pool_splits_on_last_colon() -> None:
  assert parse_pool("a:b:4") == [SlotGroup("a:b", 4)]
  assert parse_pool("fe80::1") == [SlotGroup("fe80:", 1)]


def test_parse_pool_keeps_duplicates_in_order() -> None:
  pool = parse_pool("build1:2\nbuild2:8\tbuild1:4")
  assert [group.host for group in pool] == ["build1", "build2", "build1"]
  assert [group.capacity for group in pool] == [2, 8, 4]


def test_parse_pool_zero_count_still_gives_one_slot() -> None:
  assert parse_pool("idle:0") == [SlotGroup("idle", 1)]


def test_parse_pool_empty_spec_uses_fallback() -> None:
  assert parse_pool("   ", fallback_host="here") == [SlotGroup("here", 1)]
  assert parse_pool(None, fallback_host="here") == [SlotGroup("here", 1)]


def test_parse_pool_empty_spec_without_fallback_fails() -> None:
  with pytest.raises(ConfigError):
    parse_pool("")


def test_slot_group_rejects_non_positive_capacity() -> None:
  with pytest.raises(ConfigError):
    SlotGroup("host", 0)


def test_total_slots_sums_capacities() -> None:
  assert total_slots(parse_pool("hostA:1 hostB:2 hostC:1")) == 4
  assert total_slots([]) == 0


def test_format_pool_round_trips_counts() -> None:
  assert format_pool(parse_pool("a b:3")) == "a:1 b:3"
