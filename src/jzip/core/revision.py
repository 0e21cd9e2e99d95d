from __future__ import annotations

from jzip.errors import UnsupportedVersion

# On-disk revisions. Keep the numeric ids stable forever once files are written.
REV_TEXT = 1  # one ASCII '0'/'1' byte per bit, dictionary and body
REV_PACKED = 2  # packed bits, single body run with a pad count
REV_CHUNKED = 3  # packed bits, fixed-size self-padded chunks

REVISION_TO_NAME: dict[int, str] = {
    REV_TEXT: "text",
    REV_PACKED: "packed",
    REV_CHUNKED: "chunked",
}
NAME_TO_REVISION: dict[str, int] = {v: k for k, v in REVISION_TO_NAME.items()}


def revision_id(rev: int | str) -> int:
    """Accept either the numeric id or the name ("text", "packed", "chunked")."""
    if isinstance(rev, str):
        key = rev.strip().lower()
        if key not in NAME_TO_REVISION:
            raise UnsupportedVersion(f"unknown revision: {rev!r}")
        return NAME_TO_REVISION[key]
    if int(rev) not in REVISION_TO_NAME:
        raise UnsupportedVersion(f"unknown revision id: {rev}")
    return int(rev)


def is_packed(rev: int) -> bool:
    return rev in (REV_PACKED, REV_CHUNKED)
