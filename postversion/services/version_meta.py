"""Version metadata rules.

A version lives in item metadata as ``version_<N> = <label>``. These helpers
parse that convention, pick the authoritative entry when several exist, and
compute the metadata that still has to be copied from a head onto one of its
snapshots. Everything here is pure; storage access stays in the services.
"""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..models import Item, ItemStatus, HIDDEN_STATUS
from ..schemas.version import VersionRecord, VersionStatus

logger = logging.getLogger(__name__)

VERSION_META_PREFIX = "version_"

_VERSION_KEY = re.compile(r"^version_(\d+)$")

Meta = Dict[str, List[str]]


@dataclass(frozen=True)
class VersionEntry:
    """One ``version_<N>`` key found in metadata."""
    number: int
    key: str
    label: str  # empty when the key holds no non-empty value


def version_meta_key(number: int) -> str:
    return f"{VERSION_META_PREFIX}{number}"


def parse_version_key(key: str) -> Optional[int]:
    """Version number encoded in a metadata key, or None."""
    match = _VERSION_KEY.match(key)
    return int(match.group(1)) if match else None


def is_version_key(key: str) -> bool:
    return parse_version_key(key) is not None


def version_entries(meta: Meta) -> List[VersionEntry]:
    """Every version key of ``meta``, highest number first."""
    entries = []
    for key, values in meta.items():
        number = parse_version_key(key)
        if number is None:
            continue
        label = next((v for v in values if v), "")
        entries.append(VersionEntry(number=number, key=key, label=label))
    return sorted(entries, key=lambda e: e.number, reverse=True)


def select_version_entry(meta: Meta, item_id: Optional[int] = None) -> Optional[VersionEntry]:
    """The authoritative version entry.

    Highest number holding a non-empty value wins. When no key has a value
    the highest number wins with its number as label. More than one valued
    key is a data anomaly: logged, then resolved by the same rule.
    """
    entries = version_entries(meta)
    if not entries:
        return None

    valued = [e for e in entries if e.label]
    if len(valued) > 1:
        logger.warning(
            "Multiple version entries found, keeping the highest",
            extra={
                "anomaly": "duplicate_version_meta",
                "item_id": item_id,
                "version_keys": [e.key for e in valued],
            },
        )

    chosen = (valued or entries)[0]
    if not chosen.label:
        return VersionEntry(number=chosen.number, key=chosen.key, label=str(chosen.number))
    return chosen


def derive_status(item: Item) -> VersionStatus:
    """Display status from the item's current status column."""
    if item.status == ItemStatus.PUBLISHED.value:
        return VersionStatus.LIVE
    if item.is_snapshot and item.status == HIDDEN_STATUS:
        return VersionStatus.HIDDEN
    if item.status == ItemStatus.UNRELEASED.value:
        return VersionStatus.UNRELEASED
    return VersionStatus.UNKNOWN


def build_record(item: Item, meta: Meta) -> Optional[VersionRecord]:
    """Version record of a head or snapshot, or None when it has no version."""
    entry = select_version_entry(meta, item_id=item.id)
    if entry is None:
        return None
    return VersionRecord(
        content_item_id=item.id,
        version_number=entry.number,
        label=entry.label,
        status=derive_status(item),
    )


def prune_version_meta(meta: Meta) -> Meta:
    """Copy of ``meta`` keeping a single value under the authoritative version key only."""
    chosen = select_version_entry(meta)
    pruned = {key: list(values) for key, values in meta.items() if not is_version_key(key)}
    if chosen is not None:
        pruned[chosen.key] = [chosen.label]
    return pruned


def meta_diff(source: Meta, target: Meta, ignore: Iterable[str] = ()) -> Meta:
    """Metadata present on ``source`` but absent or differing on ``target``.

    Keys missing on the target are returned whole; keys present on both only
    contribute the values the target lacks. Keys in ``ignore`` and version
    keys are skipped.
    """
    ignored = set(ignore)
    diff: Meta = {}
    for key, values in source.items():
        if key in ignored or is_version_key(key):
            continue
        if key not in target:
            diff[key] = list(values)
            continue
        missing = [v for v in values if v not in target[key]]
        if missing:
            diff[key] = missing
    return diff
