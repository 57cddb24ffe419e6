"""Tests for versioning options."""

from postversion.services import OptionsService, VersionResolver


class TestValidate:

    def test_drops_unsupported_entries(self):
        options = OptionsService.validate({"item_types": ["post", "revision", 7, "attachment", "page", "post"]})
        assert options.item_types == ["post", "page"]

    def test_missing_item_types(self):
        assert OptionsService.validate({}).item_types == []


class TestResolution:

    def test_defaults_from_settings(self, db):
        assert OptionsService(db).get().item_types == ["post", "page"]

    def test_stored_options_win_over_settings(self, db):
        OptionsService(db).update(["page"])
        service = OptionsService(db)
        assert service.get().item_types == ["page"]
        assert not service.is_versioned("post")

    def test_overrides_win_over_stored_options(self, db):
        OptionsService(db).update(["page"])
        service = OptionsService(db, overrides={"item_types": ["post"]})
        assert service.is_versioned("post")
        assert not service.is_versioned("page")

    def test_update_refreshes_cache(self, db):
        service = OptionsService(db)
        assert service.is_versioned("post")
        service.update([])
        assert not service.is_versioned("post")

    def test_unversioning_a_type_hides_its_versions(self, db, make_post, versions):
        post = make_post()
        OptionsService(db).update(["page"])

        assert VersionResolver(db).list_versions(post.id) == {}
