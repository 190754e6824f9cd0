"""Stream parsing package.

Pure, I/O-free building blocks of the token relay:
    - `framing`: balanced-brace JSON frame extraction across chunk boundaries.
    - `events`: classification of parsed frames into normalized upstream events.
"""

from chatrelay.stream.events import EventKind, UpstreamEvent, classify, classify_frame
from chatrelay.stream.framing import FrameExtractor, extract_json_objects


__all__ = [
    "EventKind",
    "UpstreamEvent",
    "classify",
    "classify_frame",
    "FrameExtractor",
    "extract_json_objects",
]
