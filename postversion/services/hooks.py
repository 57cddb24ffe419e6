"""Extension points of the versioning services.

Callers pass a ``VersioningHooks`` instance to each service instead of
toggling global filters. Every callback has a default matching the stock
behaviour, so ``VersioningHooks()`` is always a valid argument.
"""

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Sequence

if TYPE_CHECKING:
    from ..models import Item
    from ..schemas.version import VersionRecord


def _default_label(new_number: int, item: "Item", current: "VersionRecord") -> str:
    return str(new_number)


def _no_extra_ignored_keys(item: "Item", snapshot: "Item") -> List[str]:
    return []


def _copy_meta_unchanged(diff: Dict[str, List[str]], item: "Item", snapshot: "Item") -> Dict[str, List[str]]:
    return diff


def _always(*args: Any) -> bool:
    return True


def _never(*args: Any) -> bool:
    return False


@dataclass(frozen=True)
class VersioningHooks:
    """Named callbacks consulted by the versioning services.

    Attributes:
        new_version_label: ``(new_number, item, current_record) -> label``.
        meta_keys_to_ignore: ``(item, snapshot) -> keys``; added to the
            configured ignore list when copying metadata onto a snapshot.
        meta_to_copy: ``(diff, item, snapshot) -> diff``; last chance to edit
            the metadata about to be copied.
        duplicate_meta_terms: ``(snapshot) -> bool``; whether snapshots saved
            by ordinary item updates receive the head's metadata and terms.
        show_hidden_versions: ``(item_id) -> bool``; default visibility of
            hidden versions when a caller does not say.
        show_unreleased: ``(items, context) -> bool``; skip current-version
            mapping for a list read.
        prevent_unreleased_change: ``(item, target_status) -> bool``; whether
            the unreleased status guard applies.
        allow_snapshot_delete: ``(snapshot) -> bool``; lift the protection of
            version snapshots on the generic delete path.
    """

    new_version_label: Callable[[int, "Item", "VersionRecord"], str] = _default_label
    meta_keys_to_ignore: Callable[["Item", "Item"], Sequence[str]] = _no_extra_ignored_keys
    meta_to_copy: Callable[[Dict[str, List[str]], "Item", "Item"], Dict[str, List[str]]] = _copy_meta_unchanged
    duplicate_meta_terms: Callable[["Item"], bool] = _always
    show_hidden_versions: Callable[[int], bool] = _never
    show_unreleased: Callable[[Sequence["Item"], Any], bool] = _never
    prevent_unreleased_change: Callable[["Item", str], bool] = _always
    allow_snapshot_delete: Callable[["Item"], bool] = _never

    def with_overrides(self, **callbacks: Callable) -> "VersioningHooks":
        """Copy of these hooks with some callbacks replaced."""
        return replace(self, **callbacks)


DEFAULT_HOOKS = VersioningHooks()


def resolve_hooks(hooks: Optional[VersioningHooks]) -> VersioningHooks:
    return hooks if hooks is not None else DEFAULT_HOOKS
