# Copyright (c) 2025 Trae AI. All rights reserved.

import re
from typing import Optional
from .errors import RangeNotSatisfiable
from .models import StreamRange

# Single range only: "bytes=<start>-" or "bytes=<start>-<end>"
RANGE_PATTERN = re.compile(r"^bytes=(\d+)-(\d*)$")


def parse_range(header: Optional[str], size: int) -> Optional[StreamRange]:
    """
    Parses a Range request header against a file of `size` bytes.

    Returns None when no header was sent. An open or oversized end is clamped
    to the last byte; anything else that cannot be served raises
    RangeNotSatisfiable.
    """
    if header is None:
        return None

    match = RANGE_PATTERN.match(header.strip())
    if not match:
        raise RangeNotSatisfiable(f"Malformed range header: {header!r}", size=size)

    start = int(match.group(1))
    if start >= size:
        raise RangeNotSatisfiable(f"Range start {start} is beyond file size {size}", size=size)

    end = int(match.group(2)) if match.group(2) else size - 1
    if end < start:
        raise RangeNotSatisfiable(f"Range end {end} is before start {start}", size=size)

    return StreamRange(start=start, end=min(end, size - 1))
