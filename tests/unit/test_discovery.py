"""Tests for test file discovery."""

import os
from pathlib import Path

import pytest

from mcpt.discovery import discover, matches_any, resolve_targets

INCLUDE = "**/*.test.{js,ts}"


def touch(path: Path, content: str = "") -> Path:
    """Create a file and its parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


class TestDiscover:
    """Tests for discover function."""

    def test_finds_matching_files_recursively(self, tmp_path: Path) -> None:
        """Finds files at any depth that match the include pattern."""
        touch(tmp_path / "a.test.ts")
        touch(tmp_path / "nested" / "deep" / "b.test.js")
        touch(tmp_path / "nested" / "c.ts")

        result = discover(tmp_path, INCLUDE)

        assert sorted(p.name for p in result.files) == ["a.test.ts", "b.test.js"]
        assert result.skipped == ()

    def test_prunes_excluded_directories(self, tmp_path: Path) -> None:
        """Files under an excluded directory never appear in results."""
        touch(tmp_path / "a.test.ts")
        touch(tmp_path / "b.test.ts")
        touch(tmp_path / "excluded" / "c.test.ts")

        result = discover(tmp_path, INCLUDE, ["excluded"])

        assert sorted(p.name for p in result.files) == ["a.test.ts", "b.test.ts"]

    @pytest.mark.parametrize(
        "exclude",
        [
            ["**/node_modules/**"],
            ["**/dist/**", "**/node_modules/**"],
            ["node_modules"],
        ],
    )
    def test_excludes_nested_dependency_directories(
        self, tmp_path: Path, exclude: list[str]
    ) -> None:
        """Globstar exclude patterns prune directories at any depth."""
        touch(tmp_path / "pkg" / "node_modules" / "lib" / "x.test.js")
        touch(tmp_path / "node_modules" / "y.test.js")
        touch(tmp_path / "pkg" / "ok.test.js")

        result = discover(tmp_path, INCLUDE, exclude)

        names = [p.name for p in result.files]
        assert "ok.test.js" in names
        assert "y.test.js" not in names
        if exclude != ["node_modules"]:
            assert "x.test.js" not in names

    def test_excluded_directory_is_not_descended(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Excluded directories are pruned before the walker lists them."""
        touch(tmp_path / "keep" / "a.test.ts")
        touch(tmp_path / "skip" / "b.test.ts")
        visited: list[str] = []
        real_walk = os.walk

        def tracking_walk(top, **kwargs):  # type: ignore[no-untyped-def]
            for dirpath, dirnames, filenames in real_walk(top, **kwargs):
                visited.append(Path(dirpath).name)
                yield dirpath, dirnames, filenames

        monkeypatch.setattr("mcpt.discovery.os.walk", tracking_walk)

        discover(tmp_path, INCLUDE, ["skip"])

        assert "keep" in visited
        assert "skip" not in visited

    def test_excludes_matching_files(self, tmp_path: Path) -> None:
        """Exclude patterns apply to files as well as directories."""
        touch(tmp_path / "a.test.ts")
        touch(tmp_path / "slow.test.ts")

        result = discover(tmp_path, INCLUDE, ["**/slow.*"])

        assert [p.name for p in result.files] == ["a.test.ts"]

    def test_brace_alternation(self, tmp_path: Path) -> None:
        """Brace alternation selects several extensions."""
        touch(tmp_path / "a.test.py")
        touch(tmp_path / "b.test.ts")
        touch(tmp_path / "c.test.rb")

        result = discover(tmp_path, "**/*.test.{py,rb}")

        assert sorted(p.name for p in result.files) == ["a.test.py", "c.test.rb"]

    def test_returns_empty_result_for_empty_tree(self, tmp_path: Path) -> None:
        """Returns no files when nothing matches."""
        touch(tmp_path / "readme.md")

        result = discover(tmp_path, INCLUDE)

        assert result.files == ()

    def test_does_not_return_duplicates_via_symlinks(self, tmp_path: Path) -> None:
        """A file reachable through a symlink is only listed once."""
        target = touch(tmp_path / "a.test.ts")
        (tmp_path / "b.test.ts").symlink_to(target)

        result = discover(tmp_path, INCLUDE)

        assert len(result.files) == 1

    def test_records_broken_symlinks_as_skipped(self, tmp_path: Path) -> None:
        """Broken links are skipped and reported, not raised."""
        touch(tmp_path / "a.test.ts")
        (tmp_path / "gone.test.ts").symlink_to(tmp_path / "missing.test.ts")

        result = discover(tmp_path, INCLUDE)

        assert [p.name for p in result.files] == ["a.test.ts"]
        assert [s.path.name for s in result.skipped] == ["gone.test.ts"]

    @pytest.mark.skipif(
        os.name != "posix" or os.geteuid() == 0,
        reason="permission bits are not enforced",
    )
    def test_skips_unreadable_directories(self, tmp_path: Path) -> None:
        """An unreadable directory degrades to a partial result."""
        touch(tmp_path / "a.test.ts")
        locked = tmp_path / "locked"
        touch(locked / "b.test.ts")
        locked.chmod(0)

        try:
            result = discover(tmp_path, INCLUDE)
        finally:
            locked.chmod(0o755)

        assert [p.name for p in result.files] == ["a.test.ts"]
        assert [s.path for s in result.skipped] == [locked]

    def test_missing_root_is_reported_as_skipped(self, tmp_path: Path) -> None:
        """A root that cannot be listed yields no files and one skipped entry."""
        result = discover(tmp_path / "nope", INCLUDE)

        assert result.files == ()
        assert len(result.skipped) == 1


class TestResolveTargets:
    """Tests for resolve_targets function."""

    def test_discovers_with_include_when_no_targets(self, tmp_path: Path) -> None:
        """Searches the working directory when no targets are given."""
        touch(tmp_path / "a.test.ts")

        result = resolve_targets([], INCLUDE, (), cwd=tmp_path)

        assert [p.name for p in result.files] == ["a.test.ts"]

    def test_existing_file_bypasses_discovery(self, tmp_path: Path) -> None:
        """An explicit file is used even if it does not match the include."""
        touch(tmp_path / "dist" / "custom_check.js")

        result = resolve_targets(
            ["dist/custom_check.js"], INCLUDE, ["**/dist/**"], cwd=tmp_path
        )

        assert result.files == (tmp_path / "dist" / "custom_check.js",)

    def test_non_file_target_is_used_as_pattern(self, tmp_path: Path) -> None:
        """A target that is not a file is treated as an include pattern."""
        touch(tmp_path / "e2e" / "a.test.ts")
        touch(tmp_path / "unit" / "b.test.ts")

        result = resolve_targets(["./e2e/**/*.test.ts"], INCLUDE, (), cwd=tmp_path)

        assert [p.name for p in result.files] == ["a.test.ts"]

    def test_deduplicates_across_targets(self, tmp_path: Path) -> None:
        """The same file named by a path and a pattern is listed once."""
        touch(tmp_path / "a.test.ts")

        result = resolve_targets(
            ["a.test.ts", "**/*.test.ts"], INCLUDE, (), cwd=tmp_path
        )

        assert len(result.files) == 1


def test_matches_any_with_absolute_pattern(tmp_path: Path) -> None:
    """Absolute patterns are matched against absolute paths."""
    path = tmp_path / "sub" / "a.test.ts"

    assert matches_any(path, tmp_path, [f"{tmp_path.as_posix()}/**/*.test.ts"])
    assert not matches_any(path, tmp_path, [f"{tmp_path.as_posix()}/other/**"])
