"""Tests for the item save path and the unreleased status guard."""

import pytest

from postversion.exceptions import InvalidStateError, ItemNotFoundError, ValidationError
from postversion.models import Item, ItemStatus, SNAPSHOT_TYPE
from postversion.repositories import ItemRepository
from postversion.schemas import ItemCreate, ItemUpdate
from postversion.services import ItemService, StatusController, VersioningHooks
from postversion.services.status_service import status_label


def _snapshots(db, item_id):
    return db.query(Item).filter(Item.parent_id == item_id).order_by(Item.id).all()


class TestCreate:

    def test_slug_defaults_to_title(self, make_post):
        post = make_post(title="Hello, World")
        assert post.slug == "hello-world"

    def test_initial_meta_and_terms(self, items, make_post):
        post = make_post(meta={"subtitle": ["s"]}, terms=[{"name": "News"}, {"name": "News"}])
        assert items.adapter.get_metadata(post.id)["subtitle"] == ["s"]
        assert len(items.adapter.term_ids(post.id)) == 1
        assert [term.name for term in items.adapter.terms.get_terms(post.id)] == ["News"]

    def test_snapshot_type_is_rejected(self, items):
        with pytest.raises(ValidationError):
            items.create_item(ItemCreate(title="x", item_type=SNAPSHOT_TYPE))

    def test_unreleased_is_rejected(self, items):
        with pytest.raises(ValidationError):
            items.create_item(ItemCreate(title="x", status="unreleased"))

    def test_version_keys_are_rejected(self, db, items):
        with pytest.raises(ValidationError) as excinfo:
            items.create_item(ItemCreate(title="x", meta={"version_5": ["five"]}))

        assert excinfo.value.details["field"] == "meta"
        assert db.query(Item).count() == 0


class TestUpdate:

    def test_update_records_snapshot(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Second draft"))

        snapshots = _snapshots(db, post.id)
        assert len(snapshots) == 1
        assert snapshots[0].status == ItemStatus.INHERIT.value
        assert snapshots[0].content == "Second draft"

    def test_unchanged_update_records_nothing(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Second draft"))
        items.update_item(post.id, ItemUpdate(content="Second draft"))
        assert len(_snapshots(db, post.id)) == 1

    def test_term_change_counts_as_change(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Second draft"))
        items.update_item(post.id, ItemUpdate(terms=[{"name": "News"}]))
        assert len(_snapshots(db, post.id)) == 2

    def test_snapshot_receives_meta_of_versioned_head(self, db, items, make_post):
        post = make_post(meta={"subtitle": ["s"]})
        items.update_item(post.id, ItemUpdate(content="Edited"))

        snapshot = _snapshots(db, post.id)[0]
        meta = items.adapter.get_metadata(snapshot.id)
        assert meta["subtitle"] == ["s"]
        assert meta["version_1"] == ["1"]

    def test_duplicate_meta_terms_hook(self, db, options, make_post):
        service = ItemService(db, options=options, hooks=VersioningHooks(duplicate_meta_terms=lambda snapshot: False))
        post = make_post(meta={"subtitle": ["s"]})
        service.update_item(post.id, ItemUpdate(content="Edited"))

        snapshot = _snapshots(db, post.id)[0]
        assert service.adapter.get_metadata(snapshot.id) == {}

    def test_meta_update_replaces_named_keys(self, items, make_post):
        post = make_post(meta={"a": ["1"], "b": ["2"]})
        items.update_item(post.id, ItemUpdate(meta={"a": ["3", "4"]}))
        meta = items.adapter.get_metadata(post.id)
        assert meta["a"] == ["3", "4"]
        assert meta["b"] == ["2"]

    def test_version_keys_cannot_be_written(self, items, make_post, versions):
        post = make_post()

        with pytest.raises(ValidationError):
            items.update_item(post.id, ItemUpdate(title="Renamed", meta={"version_9": ["nine"]}))

        record = versions.resolver.derive_version(post.id)
        assert record.version_number == 1
        assert "version_9" not in items.adapter.get_metadata(post.id)

    def test_missing_item(self, items):
        with pytest.raises(ItemNotFoundError):
            items.update_item(12345, ItemUpdate(title="x"))

    def test_snapshots_cannot_be_edited(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Edited"))
        snapshot = _snapshots(db, post.id)[0]
        with pytest.raises(ValidationError):
            items.update_item(snapshot.id, ItemUpdate(title="x"))


class TestStatusGuard:

    @pytest.fixture()
    def unreleased(self, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        return post

    def test_unreleased_head_stays_unreleased(self, items, unreleased):
        updated = items.update_item(unreleased.id, ItemUpdate(status="draft"))
        assert updated.status == ItemStatus.UNRELEASED.value

    def test_publishing_leaves_unreleased(self, items, unreleased):
        updated = items.update_item(unreleased.id, ItemUpdate(status="published"))
        assert updated.status == ItemStatus.PUBLISHED.value

    def test_guard_can_be_disabled(self, db, options, unreleased):
        hooks = VersioningHooks(prevent_unreleased_change=lambda item, target: False)
        updated = ItemService(db, options=options, hooks=hooks).update_item(unreleased.id, ItemUpdate(status="draft"))
        assert updated.status == ItemStatus.DRAFT.value

    def test_cannot_enter_unreleased_by_saving(self, items, make_post):
        post = make_post()
        with pytest.raises(ValidationError):
            items.update_item(post.id, ItemUpdate(status="unreleased"))

    def test_controller_ignores_other_items(self, options, make_post):
        controller = StatusController(options)
        post = make_post(status="draft")
        assert controller.guard(post, "trash") == "trash"
        note = make_post(item_type="note")
        assert not controller.applies_to(note)

    def test_status_labels(self):
        assert status_label("unreleased") == "Unreleased"
        assert status_label("published") == "Published"
        assert status_label("pending_review") == "Pending Review"


class TestDelete:

    def test_head_delete_cascades(self, db, items, make_post, versions):
        post = make_post()
        snapshot_id = versions.create_new_version(post.id).details["snapshot_id"]

        items.delete_item(post.id)

        assert db.get(Item, post.id) is None
        assert db.get(Item, snapshot_id) is None
        assert items.adapter.get_metadata(snapshot_id) == {}

    def test_version_snapshot_is_protected(self, items, make_post, versions):
        post = make_post()
        snapshot_id = versions.create_new_version(post.id).details["snapshot_id"]
        with pytest.raises(InvalidStateError):
            items.delete_item(snapshot_id)

    def test_latest_snapshot_is_protected(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="one"))
        items.update_item(post.id, ItemUpdate(content="two"))
        older, latest = _snapshots(db, post.id)

        with pytest.raises(InvalidStateError):
            items.delete_item(latest.id)

        items.delete_item(older.id)
        assert db.get(Item, older.id) is None

    def test_hook_allows_snapshot_delete(self, db, options, make_post, versions):
        service = ItemService(db, options=options, hooks=VersioningHooks(allow_snapshot_delete=lambda s: True))
        post = make_post()
        snapshot_id = versions.create_new_version(post.id).details["snapshot_id"]

        service.delete_item(snapshot_id)

        assert db.get(Item, snapshot_id) is None

    def test_unversioned_snapshots_are_not_protected(self, db, items, make_post):
        note = make_post(item_type="note")
        items.update_item(note.id, ItemUpdate(content="changed"))
        snapshot = _snapshots(db, note.id)[0]
        items.delete_item(snapshot.id)
        assert db.get(Item, snapshot.id) is None


class TestItemRepository:

    def test_lookup_covers_heads_and_snapshots(self, db, items, make_post):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Edited"))
        snapshot = _snapshots(db, post.id)[0]

        repo = ItemRepository(db)

        assert repo.get_by_id(post.id).id == post.id
        assert repo.get_by_id(snapshot.id).parent_id == post.id
        assert [head.id for head in repo.get_heads()] == [post.id]
