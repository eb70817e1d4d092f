"""Tests for storage key construction."""

import pytest

from storagegate import build_key


class TestBuildKey:
    """Test build_key directory normalization."""

    def test_no_target_dir(self):
        assert build_key("f.txt") == "f.txt"

    def test_empty_target_dir(self):
        assert build_key("f.txt", "") == "f.txt"

    def test_none_target_dir(self):
        assert build_key("f.txt", None) == "f.txt"

    @pytest.mark.parametrize("target_dir", ["/", "//", "///", "/////////"])
    def test_slash_only_target_dir_returns_file_name(self, target_dir):
        assert build_key("f.txt", target_dir) == "f.txt"

    def test_strips_leading_and_trailing_slashes(self):
        assert build_key("f.txt", "/a/b/") == "a/b/f.txt"

    def test_strips_repeated_slashes_at_edges(self):
        assert build_key("f.txt", "///a/b///") == "a/b/f.txt"

    def test_plain_directory(self):
        assert build_key("report.pdf", "docs") == "docs/report.pdf"

    def test_inner_slashes_in_directory_are_kept(self):
        assert build_key("f.txt", "a//b") == "a//b/f.txt"

    def test_file_name_slashes_preserved(self):
        """File names are used verbatim, subdirectories included."""
        assert build_key("sub/dir/f.txt", "root") == "root/sub/dir/f.txt"
        assert build_key("/f.txt", "root") == "root//f.txt"
