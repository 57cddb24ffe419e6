"""Tests for the query/selection layer."""

import pytest

from postversion.exceptions import NotVersionedError, VersionNotFoundError
from postversion.schemas import ItemUpdate
from postversion.services import QueryContext, QuerySelection, VersioningHooks


@pytest.fixture()
def selection(db, options):
    return QuerySelection(db, options=options)


class TestMapResults:

    def test_unreleased_head_is_replaced_by_latest_version(self, items, make_post, versions, selection):
        post = make_post(content="Published text")
        versions.create_new_version(post.id)
        items.update_item(post.id, ItemUpdate(content="Work in progress"))

        [entry] = selection.map_results([post])

        assert not entry.is_head
        assert entry.item.content == "Published text"
        assert entry.record.version_number == 1

    def test_context_flag_passes_items_through(self, items, make_post, versions, selection):
        post = make_post()
        versions.create_new_version(post.id)

        [entry] = selection.map_results([post], QueryContext(show_unreleased=True))

        assert entry.is_head
        assert entry.record.version_number == 2

    def test_hook_passes_items_through(self, db, options, make_post, versions):
        post = make_post()
        versions.create_new_version(post.id)
        selection = QuerySelection(db, options=options, hooks=VersioningHooks(show_unreleased=lambda items, ctx: True))

        [entry] = selection.map_results([post])

        assert entry.is_head

    def test_unversioned_and_unpublished_items_are_kept(self, make_post, selection):
        note = make_post(item_type="note")
        draft = make_post(status="draft")

        mapped = selection.map_results([note, draft])

        assert [entry.id for entry in mapped] == [note.id, draft.id]
        assert all(entry.is_head for entry in mapped)


class TestRequestedVersion:

    def test_explicit_version(self, make_post, versions, selection):
        post = make_post()
        versions.create_new_version(post.id)

        response = selection.get_item(post.id, QueryContext(requested_version=1))

        assert response.version.version_number == 1
        assert response.is_head is False
        assert response.item.slug == post.slug

    def test_missing_version_is_not_found(self, make_post, selection):
        post = make_post()
        with pytest.raises(VersionNotFoundError):
            selection.get_requested_version(post.id, 5)

    def test_hidden_version_is_not_served(self, make_post, versions, selection):
        post = make_post()
        versions.create_new_version(post.id)
        versions.hide_version(post.id, 1)
        with pytest.raises(VersionNotFoundError):
            selection.get_requested_version(post.id, 1)

    def test_unversioned_item(self, make_post, selection):
        note = make_post(item_type="note")
        with pytest.raises(NotVersionedError):
            selection.get_requested_version(note.id, 1)


class TestPermalink:

    def test_permalink_uses_public_base_url(self, make_post):
        post = make_post(title="Release Notes")
        assert QuerySelection.version_permalink(post, 3) == "http://localhost:8000/release-notes/?version=3"
