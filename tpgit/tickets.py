"""TargetProcess ticket reference extraction from commit messages."""

from __future__ import annotations

import re

# "TP-123", "TP 123", "tp:123", "TP123" anywhere on a line, or "#123" at line start.
_TICKET_RE = re.compile(r"(?:TP(?:-| +|:)?|^#)([0-9]+)", re.IGNORECASE | re.MULTILINE)
_MAX_TICKET_ID = 2**63 - 1


def extract_ticket_ids(body: str) -> list[int]:
    ids: list[int] = []
    seen: set[int] = set()
    for match in _TICKET_RE.finditer(body):
        digits = match.group(1).lstrip("0") or "0"
        # Bounding the length first keeps int() away from its digit limit.
        if len(digits) > len(str(_MAX_TICKET_ID)):
            continue
        value = int(digits)
        if value > _MAX_TICKET_ID or value in seen:
            continue
        seen.add(value)
        ids.append(value)
    return ids
