"""Tests for utils/paths.py — resolving file references to local paths."""

import os

from utils.paths import basename, resolve_local_path


class TestResolveLocalPath:
    def test_absolute_path_unchanged(self):
        assert resolve_local_path("/photos/a.jpg") == "/photos/a.jpg"

    def test_relative_path_made_absolute(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_local_path("a.jpg") == str(tmp_path / "a.jpg")

    def test_dot_segments_normalised(self):
        assert resolve_local_path("/photos/x/../a.jpg") == "/photos/a.jpg"

    def test_file_uri(self):
        assert resolve_local_path("file:///photos/a.jpg") == "/photos/a.jpg"

    def test_file_uri_unquoted(self):
        assert resolve_local_path("file:///photos/my%20photo.jpg") == "/photos/my photo.jpg"

    def test_file_uri_localhost(self):
        assert resolve_local_path("file://localhost/photos/a.jpg") == "/photos/a.jpg"

    def test_remote_schemes_have_no_path(self):
        assert resolve_local_path("http://example.com/a.jpg") is None
        assert resolve_local_path("sftp://host/photos/a.jpg") is None
        assert resolve_local_path("file://otherhost/photos/a.jpg") is None

    def test_empty(self):
        assert resolve_local_path("") is None

    def test_colon_in_plain_name(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert resolve_local_path("12:30 shot.jpg") == os.path.join(str(tmp_path), "12:30 shot.jpg")


class TestBasename:
    def test_splits_on_separator(self):
        assert basename("/a/b/c.png") == "c.png"

    def test_no_separator(self):
        assert basename("c.png") == "c.png"

    def test_uri(self):
        assert basename("file:///a/c.png") == "c.png"
