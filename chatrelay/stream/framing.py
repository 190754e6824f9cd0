"""Incremental JSON frame extraction for the upstream event stream.

Architectural role:
    Lambda Chat answers a submitted turn with concatenated JSON objects and no
    reliable separator. This module recovers complete top-level objects ("frames")
    from arbitrarily chunked text. It is consumed by `llm.client.TokenRelay`.

Scanning model:
    - Single left-to-right pass with a brace-depth counter.
    - String literals are tracked inside objects only, with one character of
      look-behind for escapes (`\\"`, `\\\\`), so braces inside strings never count.
    - A frame starts when depth goes 0 -> 1 and is emitted when depth returns to 0.
    - Text outside objects (whitespace, newlines, stray `}`) is dropped.

Carryover invariant:
    Only the unterminated object, from its opening brace onward, is kept between
    fragments. At depth 0 nothing is kept, so junk never accumulates.

Determinism:
    Pure, no I/O. Output is identical for any chunking of the same payload.
"""

from typing import List, Tuple


class FrameExtractor:
    """Stateful scanner that turns text fragments into complete JSON frames.

    The scan resumes where the previous fragment stopped; carryover text is never
    rescanned.

    Example:
        extractor = FrameExtractor()
        extractor.feed('{"type":"str')        # []
        extractor.feed('eam","token":"a"}')   # ['{"type":"stream","token":"a"}']
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.depth = 0
        self.in_string = False
        self.pending_escape = False
        self._carryover = ""

    @property
    def pending(self) -> str:
        """Unterminated object text held for the next fragment."""
        return self._carryover

    def feed(self, fragment: str) -> List[str]:
        """Scan one fragment and return the frames it completes, in closing order.

        Args:
            fragment: Newly arrived decoded text.

        Returns:
            Complete top-level JSON object substrings.
        """
        if not fragment:
            return []

        if self.depth:
            text = self._carryover + fragment
            position = len(self._carryover)
            start = 0
        else:
            text = fragment
            position = 0
            start = -1

        depth = self.depth
        in_string = self.in_string
        escape = self.pending_escape
        frames = []

        for index in range(position, len(text)):
            ch = text[index]

            if in_string:
                if escape:
                    escape = False
                elif ch == "\\":
                    escape = True
                elif ch == '"':
                    in_string = False
                continue

            if ch == "{":
                if depth == 0:
                    start = index
                depth += 1
            elif depth == 0:
                continue
            elif ch == '"':
                in_string = True
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    frames.append(text[start:index + 1])
                    start = -1

        self.depth = depth
        self.in_string = in_string
        self.pending_escape = escape
        self._carryover = text[start:] if depth else ""
        return frames


def extract_json_objects(buffer: str) -> Tuple[List[str], str]:
    """Stateless form: return `(frames, remainder)` for one buffer.

    The caller prepends `remainder` to the next buffer. Since the remainder always
    starts at an opening brace, a fresh scan over it reproduces the same state.
    """
    extractor = FrameExtractor()
    frames = extractor.feed(buffer)
    return frames, extractor.pending
