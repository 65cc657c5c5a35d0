"""
Pulls repository identifiers out of a go.mod style manifest.
Only lines shaped like `<module-path> v<version>` are considered, anything else is skipped.
"""

import asyncio
import logging
import re
from typing import Iterable, Iterator

from .models import Identifier

MODULE_LINE = re.compile(r"^\s*(\S+) v(\S+)")


def parse_line(line: str) -> Identifier | None:
    match = MODULE_LINE.match(line)
    if not match:
        return None

    parts = match.group(1).split("/")
    # host/owner/name is the minimum, shorter paths don't name a hosted repo
    if len(parts) <= 2:
        return None

    return Identifier(path="/".join(parts[:3]))


def extract_identifiers(lines: Iterable[str]) -> Iterator[Identifier]:
    for line in lines:
        if identifier := parse_line(line):
            yield identifier


async def collect_identifiers(
    lines: Iterable[str], queue: asyncio.Queue[Identifier | None]
) -> int:
    """Feed identifiers into the queue in manifest order, then the end-of-stream sentinel."""
    count = 0
    try:
        for identifier in extract_identifiers(lines):
            await queue.put(identifier)
            count += 1
    finally:
        await queue.put(None)

    logging.info(f"Extracted {count} identifiers from manifest")
    return count
