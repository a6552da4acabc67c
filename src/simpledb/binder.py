"""Placeholder binding for SQL fragments.

``?`` is the only placeholder syntax. Each ``?`` consumes one value, left to
right. A scalar stays a single ``?``; a list or tuple of N values expands its
``?`` into ``?, ?, ...`` (N markers) so ``IN (?)`` and ``FIELD(id, ?)`` take a
whole sequence.

Examples:
    >>> bind("WHERE id BETWEEN ? AND ?", [1, 3])
    Fragment(text='WHERE id BETWEEN ? AND ?', params=(1, 3))
    >>> bind("WHERE id IN (?)", [[2, 3, 1]])
    Fragment(text='WHERE id IN (?, ?, ?)', params=(2, 3, 1))
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

from simpledb.errors import BindingError

PLACEHOLDER = "?"


@dataclass(frozen=True)
class Fragment:
    """SQL text with its placeholders already expanded, plus flat params."""

    text: str
    params: tuple[Any, ...] = ()


def is_list_value(value: Any) -> bool:
    """Whether ``value`` expands into several placeholders."""
    return isinstance(value, (list, tuple, set, frozenset, range))


def bind(text: str, values: Sequence[Any] = ()) -> Fragment:
    """Pair each ``?`` in ``text`` with one entry of ``values``.

    Raises:
        BindingError: If the number of ``?`` markers differs from the number
            of values, or a list value is empty.
    """
    pieces = text.split(PLACEHOLDER)
    markers = len(pieces) - 1
    if markers != len(values):
        raise BindingError(
            f"Fragment has {markers} placeholder(s) but {len(values)} value(s) were bound",
            placeholders=markers,
            values=len(values),
        ).with_context(sql=text)

    out = [pieces[0]]
    params: list[Any] = []
    for index, value in enumerate(values):
        if is_list_value(value):
            items = list(value)
            if not items:
                raise BindingError(
                    f"List value for placeholder {index + 1} is empty",
                    placeholders=markers,
                    values=len(values),
                ).with_context(sql=text)
            out.append(", ".join(PLACEHOLDER for _ in items))
            params.extend(items)
        else:
            out.append(PLACEHOLDER)
            params.append(value)
        out.append(pieces[index + 1])

    return Fragment(text="".join(out), params=tuple(params))


def join(fragments: Iterable[Fragment]) -> Fragment:
    """Concatenate fragments with a single space, chaining their params."""
    fragments = list(fragments)
    return Fragment(
        text=" ".join(f.text for f in fragments),
        params=tuple(p for f in fragments for p in f.params),
    )


__all__ = [
    "PLACEHOLDER",
    "Fragment",
    "bind",
    "is_list_value",
    "join",
]
