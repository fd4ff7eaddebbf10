"""Tests for the options store."""

import pytest

from urlscan_submitter.api.models import Visibility
from urlscan_submitter.config import CUSTOM_USER_AGENT_FALLBACK, USER_AGENTS
from urlscan_submitter.storage.options import OptionsStore


@pytest.fixture
def options(tmp_path):
    return OptionsStore(tmp_path / "options")


class TestOptionsStore:
    """Tests for OptionsStore class."""

    def test_creates_default_files(self, options):
        names = {p.name for p in options.options_dir.iterdir()}
        assert {"links.txt", "tags.txt", "scan-visibility.txt", "user-agent.txt"} <= names

    def test_defaults(self, options):
        assert options.load_urls() == []
        assert options.load_tags() == ()
        assert options.get_visibility() is Visibility.PUBLIC
        assert options.get_user_agent_type() == "default"

    def test_load_urls_filters_non_http(self, options):
        options.path("links.txt").write_text(
            "# comment\nhttps://a.com\n\nftp://b.com\nhttp://c.com\nexample.org\n",
            encoding="utf-8",
        )
        assert options.load_urls() == ["https://a.com", "http://c.com"]

    def test_add_url_appends(self, options):
        options.add_url("https://a.com")
        options.add_url("https://b.com")
        assert options.load_urls() == ["https://a.com", "https://b.com"]

    def test_add_url_without_trailing_newline(self, options):
        options.path("links.txt").write_text("https://a.com", encoding="utf-8")
        options.add_url("https://b.com")
        assert options.load_urls() == ["https://a.com", "https://b.com"]

    def test_save_urls_replaces(self, options):
        options.add_url("https://old.com")
        options.save_urls(["https://new.com"])
        assert options.load_urls() == ["https://new.com"]

    def test_tags_merge_fixed_and_custom(self, options):
        options.path("fixed-tags.txt").write_text("team\n# note\nshared\n", encoding="utf-8")
        options.save_tags(["mine", "team"])

        assert options.load_tags() == ("team", "shared", "mine")

    def test_combine_tags(self, options):
        options.path("fixed-tags.txt").write_text("team\n", encoding="utf-8")
        assert options.combine_tags(["x", " ", "team"]) == ("team", "x")

    def test_set_visibility(self, options):
        options.set_visibility("Private")
        assert options.get_visibility() is Visibility.PRIVATE

    def test_invalid_visibility_rejected(self, options):
        with pytest.raises(ValueError):
            options.set_visibility("secret")

    def test_unknown_visibility_in_file_falls_back(self, options):
        options.path("scan-visibility.txt").write_text("hidden\n", encoding="utf-8")
        assert options.get_visibility() is Visibility.PUBLIC

    def test_browser_user_agent(self, options):
        options.set_user_agent_type("firefox")
        assert options.get_user_agent() == USER_AGENTS["firefox"]

    def test_custom_user_agent(self, options):
        options.set_user_agent_type("custom")
        assert options.get_user_agent() == CUSTOM_USER_AGENT_FALLBACK

        options.set_custom_user_agent("MyScanner/2.0")
        assert options.get_user_agent() == "MyScanner/2.0"

    def test_default_user_agent_names_tool(self, options):
        assert options.get_user_agent().startswith("urlscan-submitter/")

    def test_invalid_user_agent_type(self, options):
        with pytest.raises(ValueError):
            options.set_user_agent_type("netscape")

    def test_recreates_deleted_file(self, options):
        options.path("links.txt").unlink()
        assert options.load_urls() == []
        assert options.path("links.txt").exists()

    def test_list_files(self, options):
        options.add_tag("one")
        files = options.list_files()
        assert files["tags.txt"]["entries"] == 1
