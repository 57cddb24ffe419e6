"""Tests for version listing and current-version resolution."""

import logging

from postversion.models import ItemStatus
from postversion.schemas import ItemUpdate
from postversion.services import HeadVersion, HistoricalVersion, VersionResolver, VersioningHooks
from postversion.services.version_resolver import parse_selector


class TestListVersions:

    def test_published_head_is_listed(self, make_post, versions):
        post = make_post()
        listed = versions.resolver.list_versions(post.id)
        assert list(listed) == [1]
        assert isinstance(listed[1], HeadVersion)

    def test_draft_head_is_not_listed(self, make_post, versions):
        post = make_post(status="draft")
        assert versions.resolver.list_versions(post.id) == {}

    def test_hidden_filter_and_superset(self, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        versions.create_new_version(post.id)
        versions.hide_version(post.id, 1)

        visible = versions.resolver.list_versions(post.id, include_hidden=False)
        everything = versions.resolver.list_versions(post.id, include_hidden=True)

        assert list(visible) == [2]
        assert list(everything) == [2, 1]
        assert set(visible) <= set(everything)
        assert all(entry.status != "draft" for entry in visible.values())

    def test_inherit_snapshots_are_ignored(self, items, make_post, versions):
        post = make_post()
        items.update_item(post.id, ItemUpdate(content="Autosaved edit"))
        assert list(versions.resolver.list_versions(post.id, include_hidden=True)) == [1]

    def test_hook_decides_default_visibility(self, db, options, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        versions.hide_version(post.id, 1)

        resolver = VersionResolver(db, options=options, hooks=VersioningHooks(show_hidden_versions=lambda item_id: True))
        assert list(resolver.list_versions(post.id)) == [1]
        assert list(versions.resolver.list_versions(post.id)) == []

    def test_unversioned_item_has_no_versions(self, make_post, versions):
        note = make_post(item_type="note")
        assert versions.resolver.list_versions(note.id) == {}

    def test_duplicate_numbers_keep_the_newest(self, db, make_post, versions, caplog):
        post = make_post()
        versions.create_new_version(post.id)
        versions.create_new_version(post.id)
        newest = versions.resolver.get_version(post.id, 2)
        # Rewrite the newest snapshot's number so both snapshots claim version 1.
        versions.adapter.delete_metadata(newest.id, "version_2")
        versions.adapter.add_metadata(newest.id, "version_1", "1")
        db.commit()

        with caplog.at_level(logging.WARNING):
            listed = versions.resolver.list_versions(post.id)

        assert list(listed) == [1]
        assert listed[1].id == newest.id
        assert any(getattr(r, "anomaly", None) == "duplicate_version_number" for r in caplog.records)


class TestResolveCurrent:

    def test_missing_item(self, versions):
        assert versions.resolver.resolve_current(404) is None

    def test_published_head_is_current(self, make_post, versions):
        post = make_post()
        current = versions.resolver.resolve_current(post.id)
        assert current.is_head
        assert current.record.version_number == 1

    def test_unreleased_head_resolves_to_latest_snapshot(self, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        versions.create_new_version(post.id)

        current = versions.resolver.resolve_current(post.id)

        assert isinstance(current, HistoricalVersion)
        assert current.record.version_number == 2
        assert current.slug == post.slug
        assert current.parent_id == post.id

    def test_all_versions_hidden_falls_back_to_head(self, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        versions.hide_version(post.id, 1)

        current = versions.resolver.resolve_current(post.id)

        assert current.is_head
        assert current.status == ItemStatus.UNRELEASED.value

    def test_snapshot_id_resolves_through_parent(self, make_post, versions):
        post = make_post()
        result = versions.create_new_version(post.id)
        current = versions.resolver.resolve_current(result.details["snapshot_id"])
        assert current.id == result.details["snapshot_id"]
        assert current.parent_id == post.id

    def test_unversioned_item_is_returned_unchanged(self, make_post, versions):
        note = make_post(item_type="note", status="draft")
        current = versions.resolver.resolve_current(note.id)
        assert current.is_head
        assert current.record is None


class TestNextVersionNumber:

    def test_counts_hidden_versions(self, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        versions.create_new_version(post.id)
        versions.hide_version(post.id, 2)
        assert versions.resolver.next_version_number(post.id) == 3

    def test_without_history(self, make_post, versions):
        post = make_post(status="draft")
        assert versions.resolver.next_version_number(post.id) == 1


class TestParseSelector:

    def test_digits_select_by_number(self):
        assert parse_selector("12") == 12
        assert parse_selector(" 3 ") == 3

    def test_anything_else_is_a_label(self):
        assert parse_selector("v2") == "v2"
        assert parse_selector("-1") == "-1"

    def test_non_decimal_digits_are_a_label(self):
        assert parse_selector("\u00b2") == "\u00b2"
