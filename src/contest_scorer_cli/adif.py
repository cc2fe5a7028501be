from __future__ import annotations

import re

ADIF_FIELD_RE = re.compile(
    r"<(?P<name>[A-Za-z0-9_]+):(?P<len>\d+)(:[A-Za-z0-9]+)?>",
    re.IGNORECASE,
)

_END_OF_RECORD = "<eor>"
_END_OF_HEADER = "<eoh>"


def parse_adif(content: str) -> list[dict[str, str]]:
    """Parse ADIF text into one field mapping per record.

    Field names are lower-cased and values stripped. Anything before
    ``<EOH>`` is header and is dropped. A final record without ``<EOR>``
    is kept.
    """
    records: list[dict[str, str]] = []
    current: dict[str, str] = {}
    lower_content = content.lower()
    idx = 0
    length = len(content)
    while idx < length:
        if lower_content.startswith(_END_OF_RECORD, idx):
            if current:
                records.append(current)
            current = {}
            idx += len(_END_OF_RECORD)
            continue
        if lower_content.startswith(_END_OF_HEADER, idx):
            current = {}
            idx += len(_END_OF_HEADER)
            continue
        match = ADIF_FIELD_RE.match(content, idx)
        if not match:
            idx += 1
            continue
        value_start = match.end()
        value_end = value_start + int(match.group("len"))
        current[match.group("name").lower()] = content[value_start:value_end].strip()
        idx = value_end

    if current:
        records.append(current)
    return records
