from __future__ import annotations

import re
from typing import Union

_RUN_RE = re.compile(r"(\d+)")


def natural_key(name: str) -> tuple[tuple[tuple[int, Union[int, str]], ...], str]:
    """
    Sort key for numeric-aware, case-insensitive ordering.

    "b2" sorts before "b10". The raw name is the final tie-breaker so the
    order stays total ("A1" and "a1" do not compare equal).
    """
    parts: list[tuple[int, Union[int, str]]] = []
    for run in _RUN_RE.split(name):
        if not run:
            continue
        if run.isdecimal():
            parts.append((0, int(run)))
        else:
            parts.append((1, run.casefold()))
    return tuple(parts), name


def natural_sorted(names: list[str]) -> list[str]:
    return sorted(names, key=natural_key)
