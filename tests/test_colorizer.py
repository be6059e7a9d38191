from __future__ import annotations

import pytest
from termcolor import COLORS

from slotdispatch.colorizer import (
  RESET_FOREGROUND,
  color_for,
  colorize,
  parse_palette,
  select_foreground,
)
from slotdispatch.errors import ConfigError


@pytest.mark.parametrize("color", [None, ""])
def test_colorize_without_color_is_identity(color) -> None:
  assert list(colorize(["a\n", "b\n"], color)) == ["a\n", "b\n"]
  assert list(colorize([], color)) == []


def test_colorize_wraps_stream_once() -> None:
  out = list(colorize(["a", "b"], "red"))
  assert out == [f"\033[{COLORS['red']}m", "a", "b", RESET_FOREGROUND]


def test_colorize_resets_even_for_empty_stream() -> None:
  out = list(colorize(iter([]), "blue"))
  assert out == [select_foreground("blue"), RESET_FOREGROUND]
  assert out.count(RESET_FOREGROUND) == 1


def test_colorize_is_lazy() -> None:
  consumed = []

  def _lines():
    for line in ("one", "two"):
      consumed.append(line)
      yield line

  stream = colorize(_lines(), "green")
  assert next(stream) == select_foreground("green")
  assert consumed == []
  assert next(stream) == "one"
  assert consumed == ["one"]


def test_select_foreground_accepts_numeric_codes() -> None:
  assert select_foreground("35") == "\033[35m"


def test_parse_palette_validates_names() -> None:
  assert parse_palette("red  green\tblue") == ["red", "green", "blue"]
  assert parse_palette(None) == []
  with pytest.raises(ConfigError):
    parse_palette("red mauve")


def test_color_for_wraps_modulo_palette_length() -> None:
  palette = ["red", "green", "blue"]
  assert [color_for(palette, i) for i in range(5)] == ["red", "green", "blue", "red", "green"]
  assert color_for([], 7) is None
