from __future__ import annotations

from typing import Optional


def wrap_line(text: str, width: int) -> list[str]:
    """Greedily wrap *text* into lines of at most *width* characters.

    Lines break only at spaces, and the breaking space is dropped. A word
    longer than *width* is never split; it overflows onto a line of its own.
    Width is measured in characters, not terminal cells. The last line is
    always emitted, so empty input yields ``[""]``.
    """
    if width < 1:
        raise ValueError(f"width must be positive, got {width}")

    wrapped: list[str] = []
    start = 0
    space: Optional[int] = None  # last break point since `start`
    line = 0
    word = 0

    for i, c in enumerate(text):
        if c == " ":
            space = i
            word = 0
        else:
            word += 1

        if line >= width and space is not None:
            wrapped.append(text[start:space])
            start = space + 1
            space = None
            line = word
        else:
            line += 1

    wrapped.append(text[start:])
    return wrapped
