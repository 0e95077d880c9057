"""
Iterative JSON encoding for result documents.

Flame graphs and profile trees nest one level per stack frame, which can exceed
the interpreter recursion limit that ``json.dumps`` is bound by.
"""

import json
from typing import Any, Iterator, List, Optional


def iter_json(obj: Any, indent: Optional[int] = None) -> Iterator[str]:
    """
    Encode a document of dicts, lists and scalars as JSON text chunks.

    Produces the same text as ``json.dumps(obj, indent=indent)`` without
    recursing on the call stack.

    Args:
        obj: Document to encode
        indent: Spaces per nesting level, or None for single-line output

    Yields:
        Pieces of JSON text; joined they form the whole document
    """
    item_separator = ',' if indent is not None else ', '
    # items are either literal text or (value, nesting level) pairs
    stack: List[Any] = [(obj, 0)]
    while stack:
        item = stack.pop()
        if isinstance(item, str):
            yield item
            continue
        value, level = item

        if isinstance(value, dict):
            entries = [(key if isinstance(key, str) else _key_text(key), child)
                       for key, child in value.items()]
            opening, closing = '{', '}'
        elif isinstance(value, (list, tuple)):
            entries = [(None, child) for child in value]
            opening, closing = '[', ']'
        else:
            yield json.dumps(value)
            continue

        if not entries:
            yield opening + closing
            continue

        yield opening
        stack.append(_newline(indent, level) + closing)
        for position in range(len(entries) - 1, -1, -1):
            key, child = entries[position]
            stack.append((child, level + 1))
            prefix = _newline(indent, level + 1)
            if position > 0:
                prefix = item_separator + prefix
            if key is not None:
                prefix += json.dumps(key) + ': '
            stack.append(prefix)


def dumps(obj: Any, indent: Optional[int] = None) -> str:
    return ''.join(iter_json(obj, indent))


def _newline(indent: Optional[int], level: int) -> str:
    if indent is None:
        return ''
    return '\n' + ' ' * (indent * level)


def _key_text(key: Any) -> str:
    if key is None:
        return 'null'
    if isinstance(key, bool):
        return 'true' if key else 'false'
    return str(key)
