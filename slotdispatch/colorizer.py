"""
Per-instance output coloring.

Many dispatcher instances share one terminal during a parallel build, so each
pool entry visited picks the next color from a configured palette and the
dispatched command's output is wrapped in that color.  The wrapping is lazy:
lines are forwarded as soon as the child produces them.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Sequence

from termcolor import COLORS

from slotdispatch.errors import ConfigError

RESET_FOREGROUND = '\033[39m'


def _sgr_code(color: str) -> int:
  if color in COLORS:
    return COLORS[color]
  if color.isdigit():
    return int(color)
  raise ConfigError(f"unknown color {color!r}; expected one of {', '.join(sorted(COLORS))}")


def select_foreground(color: str) -> str:
  """Return the control sequence that switches the foreground to ``color``."""
  return f"\033[{_sgr_code(color)}m"


def parse_palette(text: Optional[str]) -> List[str]:
  palette = (text or '').split()
  for color in palette:
    _sgr_code(color)
  return palette


def color_for(palette: Sequence[str], index: int) -> Optional[str]:
  """Pick ``palette[index mod len(palette)]``; ``None`` for an empty palette."""
  if not palette:
    return None
  return palette[index % max(1, len(palette))]


def colorize(lines: Iterable[str], color: Optional[str]) -> Iterator[str]:
  """
  Wrap ``lines`` in a foreground color.

  With no color the lines pass through untouched.  Otherwise one select
  sequence precedes the first line and exactly one reset follows the last,
  including when ``lines`` is empty.
  """
  if not color:
    yield from lines
    return

  yield select_foreground(color)
  yield from lines
  yield RESET_FOREGROUND
