"""Route the lines of a .proto file into keyword-scoped buckets."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

_LOGGER = logging.getLogger(__name__)


class LineKind(Enum):
    SYNTAX = "syntax"
    PACKAGE = "package"
    OPTION = "option"
    IMPORT = "import"
    SERVICE = "service"
    MESSAGE = "message"
    # Sub-state of SERVICE: option lines that follow an rpc belong to it.
    RPC = "rpc"


_KEYWORDS: Dict[str, LineKind] = {kind.value: kind for kind in LineKind}


@dataclass
class LineBuckets:
    syntax: List[str] = field(default_factory=list)
    package: List[str] = field(default_factory=list)
    option: List[str] = field(default_factory=list)
    import_: List[str] = field(default_factory=list)
    service: List[str] = field(default_factory=list)
    message: List[str] = field(default_factory=list)

    def bucket(self, kind: LineKind) -> List[str]:
        if kind in (LineKind.SERVICE, LineKind.RPC):
            return self.service
        if kind == LineKind.IMPORT:
            return self.import_
        return getattr(self, kind.value)


def classify_lines(text: str) -> LineBuckets:
    """Split text into trimmed non-empty lines and bucket them by leading keyword.

    Lines that do not start with a keyword continue whatever construct the
    previous keyword line opened. Lines before the first keyword are dropped.
    """
    buckets = LineBuckets()
    last: Optional[LineKind] = None

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue

        kind = _KEYWORDS.get(line.split()[0])

        if kind == LineKind.OPTION and last == LineKind.RPC:
            buckets.service.append(line)
        elif kind is not None:
            last = kind
            buckets.bucket(kind).append(line)
        elif last is not None:
            buckets.bucket(last).append(line)

    _LOGGER.debug(
        "classified lines: syntax=%d package=%d import=%d option=%d service=%d message=%d",
        len(buckets.syntax),
        len(buckets.package),
        len(buckets.import_),
        len(buckets.option),
        len(buckets.service),
        len(buckets.message),
    )
    return buckets
