"""
End-to-end tests for Matcher.matches over real directory trees
"""

import os

import pytest

from xignore import (
    Matcher,
    MatchesOptions,
    NotFoundError,
    PatternError,
    dir_matches,
)

SIMPLE = {
    ".xignore": ".xignore\n*.log\n",
    "empty.log": "",
    "rain.txt": "",
}

NESTED = {
    ".xignore": "inner/foo.md\n",
    "1.txt": "",
    "inner/.xignore": "*.lst\n",
    "inner/2.lst": "",
    "inner/foo.md": "",
    "inner/inner2/.xignore": "moss.ini\n",
    "inner/inner2/jess.ini": "",
    "inner/inner2/moss.ini": "",
}


def native(paths):
    return [p.replace('/', os.sep) for p in paths]


def run(root, **options):
    options.setdefault('ignorefile', '.xignore')
    return Matcher.system().matches(root, MatchesOptions(**options))


def assert_result(result, matched_files=(), unmatched_files=(), matched_dirs=(),
                  unmatched_dirs=()):
    assert result.matched_files == native(matched_files)
    assert result.unmatched_files == native(unmatched_files)
    assert result.matched_dirs == native(matched_dirs)
    assert result.unmatched_dirs == native(unmatched_dirs)


def test_simple(make_tree):
    result = run(make_tree(SIMPLE))
    assert_result(
        result,
        matched_files=[".xignore", "empty.log"],
        unmatched_files=["rain.txt"],
    )
    assert result.error_files == []
    assert result.error_dirs == []


def test_simple_with_before_patterns(make_tree):
    result = run(make_tree(SIMPLE), before_patterns=["rain.txt"])
    assert_result(result, matched_files=[".xignore", "empty.log", "rain.txt"])


def test_before_patterns_are_overridden_by_the_file(make_tree):
    result = run(make_tree(SIMPLE), before_patterns=["!empty.log"])
    assert "empty.log" in result.matched_files


def test_simple_with_after_patterns(make_tree):
    result = run(
        make_tree(SIMPLE),
        after_patterns=["!.xignore", "!empty.log", "rain.txt"],
    )
    assert_result(
        result,
        matched_files=["rain.txt"],
        unmatched_files=[".xignore", "empty.log"],
    )


def test_after_pattern_wins_over_file_rule(make_tree):
    tree = {**SIMPLE, ".xignore": "rain.txt\n"}
    result = run(make_tree(tree), after_patterns=["!rain.txt"])
    assert "rain.txt" in result.unmatched_files


def test_folder(make_tree):
    root = make_tree({
        ".xignore": "foo/bar\n!foo/bar/tool\n",
        "foo/bar/1.txt": "",
        "foo/bar/tool/lex.txt": "",
        "foo/tar/2.txt": "",
    })
    assert_result(
        run(root),
        matched_files=["foo/bar/1.txt"],
        unmatched_files=[".xignore", "foo/bar/tool/lex.txt", "foo/tar/2.txt"],
        matched_dirs=["foo/bar"],
        unmatched_dirs=["foo", "foo/bar/tool", "foo/tar"],
    )


def test_root(make_tree):
    root = make_tree({
        ".xignore": "1.txt\n",
        "1.txt": "",
        "sub/1.txt": "",
        "sub/2.txt": "",
    })
    assert_result(
        run(root),
        matched_files=["1.txt"],
        unmatched_files=[".xignore", "sub/1.txt", "sub/2.txt"],
        unmatched_dirs=["sub"],
    )


def test_exclusion(make_tree):
    root = make_tree({
        ".xignore": "e*.txt\n!e2.txt\nen/e3.txt\n",
        "!": "",
        "e1.txt": "",
        "e2.txt": "",
        "e3.txt": "",
        "en/e1.txt": "",
        "en/e2.txt": "",
        "en/e3.txt": "",
    })
    assert_result(
        run(root),
        matched_files=["e1.txt", "e3.txt", "en/e3.txt"],
        unmatched_files=["!", ".xignore", "e2.txt", "en/e1.txt", "en/e2.txt"],
        unmatched_dirs=["en"],
    )


def test_disabled_nested(make_tree):
    result = run(make_tree(NESTED), nested=False)
    assert_result(
        result,
        matched_files=["inner/foo.md"],
        unmatched_files=[
            ".xignore", "1.txt",
            "inner/.xignore", "inner/2.lst",
            "inner/inner2/.xignore", "inner/inner2/jess.ini", "inner/inner2/moss.ini",
        ],
        unmatched_dirs=["inner", "inner/inner2"],
    )


def test_nested(make_tree):
    result = run(make_tree(NESTED), nested=True)
    assert_result(
        result,
        matched_files=["inner/2.lst", "inner/foo.md", "inner/inner2/moss.ini"],
        unmatched_files=[
            ".xignore", "1.txt",
            "inner/.xignore",
            "inner/inner2/.xignore", "inner/inner2/jess.ini",
        ],
        unmatched_dirs=["inner", "inner/inner2"],
    )


def test_nested_scope_unmatches_inside_matched_directory(make_tree):
    root = make_tree({
        ".xignore": "inner\n",
        "inner/.xignore": "!keep.md\n",
        "inner/keep.md": "",
        "inner/a.txt": "",
    })
    result = run(root, nested=True)
    assert_result(
        result,
        matched_files=["inner/.xignore", "inner/a.txt"],
        unmatched_files=[".xignore", "inner/keep.md"],
        matched_dirs=["inner"],
    )


def test_by_name(make_tree):
    root = make_tree({
        ".xignore": "**/hello.txt\n",
        "hello.txt": "",
        "aa/hello.txt": "",
        "aa/a1/hello.txt": "",
        "aa/a1/a2/hello.txt": "",
        "bb/hello.txt": "",
    })
    assert_result(
        run(root),
        matched_files=[
            "aa/a1/a2/hello.txt", "aa/a1/hello.txt", "aa/hello.txt", "bb/hello.txt", "hello.txt",
        ],
        unmatched_files=[".xignore"],
        unmatched_dirs=["aa", "aa/a1", "aa/a1/a2", "bb"],
    )


def test_same_name_for_file_and_directory(make_tree):
    root = make_tree({
        ".xignore": "**/loss.txt\n",
        "foo/loss.txt": "",
        "loss.txt/1.log": "",
        "loss.txt/2.log": "",
    })
    assert_result(
        run(root),
        matched_files=["foo/loss.txt", "loss.txt/1.log", "loss.txt/2.log"],
        unmatched_files=[".xignore"],
        matched_dirs=["loss.txt"],
        unmatched_dirs=["foo"],
    )


def test_leading_space(make_tree):
    root = make_tree({
        ".xignore": "  what.txt\ninner2/  what.txt\n",
        "  what.txt": "",
        "inner/  what.txt": "",
        "inner2/  what.txt": "",
    })
    assert_result(
        run(root),
        matched_files=["  what.txt", "inner2/  what.txt"],
        unmatched_files=[".xignore", "inner/  what.txt"],
        unmatched_dirs=["inner", "inner2"],
    )


def test_precedence_later_rule_wins(make_tree):
    root = make_tree({
        ".xignore": "a/*\n!a/keep.txt\n",
        "a/keep.txt": "",
        "a/x.txt": "",
        "a/y.txt": "",
    })
    result = run(root)
    assert "a/keep.txt" in result.unmatched_files
    assert {"a/x.txt", "a/y.txt"} <= set(result.matched_files)


def test_explicit_rule_beats_directory_cascade(make_tree):
    root = make_tree({
        ".xignore": "d\n!d/special.txt\n",
        "d/special.txt": "",
        "d/a.txt": "",
        "d/sub/b.txt": "",
    })
    assert_result(
        run(root),
        matched_files=["d/a.txt", "d/sub/b.txt"],
        unmatched_files=[".xignore", "d/special.txt"],
        matched_dirs=["d", "d/sub"],
    )


def test_missing_ignorefile_leaves_everything_unmatched(make_tree):
    root = make_tree({"a.txt": "", "b/c.txt": ""})
    assert_result(run(root), unmatched_files=["a.txt", "b/c.txt"], unmatched_dirs=["b"])


def test_default_ignorefile_name(make_tree, monkeypatch):
    monkeypatch.delenv("XIGNORE_FILENAME", raising=False)
    result = dir_matches(make_tree(SIMPLE))
    assert result.matched_files == [".xignore", "empty.log"]


def test_ignorefile_from_environment(make_tree, monkeypatch):
    monkeypatch.setenv("XIGNORE_FILENAME", ".customignore")
    root = make_tree({".customignore": "*.txt\n", "a.txt": "", "b.md": ""})
    result = dir_matches(root)
    assert result.matched_files == ["a.txt"]


def test_base_dir_is_reported(make_tree):
    root = make_tree(SIMPLE)
    assert run(root).base_dir == str(root)


def test_result_lists_are_disjoint_and_complete(make_tree):
    root = make_tree(NESTED)
    result = run(root, nested=True)

    lists = [
        result.matched_files, result.unmatched_files,
        result.matched_dirs, result.unmatched_dirs,
        result.error_files, result.error_dirs,
    ]
    combined = [p for paths in lists for p in paths]
    assert len(combined) == len(set(combined))

    on_disk = {
        os.path.relpath(os.path.join(dirpath, name), root)
        for dirpath, dirnames, filenames in os.walk(root)
        for name in dirnames + filenames
    }
    assert set(combined) == on_disk


def test_matching_is_idempotent(make_tree):
    root = make_tree(NESTED)
    matcher = Matcher.system()
    options = MatchesOptions(ignorefile=".xignore", nested=True)
    assert matcher.matches(root, options) == matcher.matches(root, options)


def test_missing_base_dir(tmp_path):
    with pytest.raises(NotFoundError):
        run(tmp_path / "does-not-exist")


def test_base_dir_is_a_file(tmp_path):
    target = tmp_path / "file.txt"
    target.write_text("")
    with pytest.raises(NotFoundError, match="not a directory"):
        run(target)


def test_not_found_is_a_file_not_found_error(tmp_path):
    with pytest.raises(FileNotFoundError):
        run(tmp_path / "nope")


def test_malformed_glob_in_file_fails_the_call(make_tree):
    root = make_tree({".xignore": "ok.txt\n[unterminated\n", "ok.txt": ""})
    with pytest.raises(PatternError):
        run(root)


def test_malformed_before_pattern_fails_the_call(make_tree):
    with pytest.raises(PatternError) as exc_info:
        run(make_tree(SIMPLE), before_patterns=["oops\\"])
    assert exc_info.value.source == "before_patterns"


def test_malformed_nested_glob_fails_only_when_nested(make_tree):
    root = make_tree({"sub/.xignore": "[x\n", "sub/a.txt": ""})
    assert run(root, nested=False).unmatched_files == native(["sub/.xignore", "sub/a.txt"])
    with pytest.raises(PatternError):
        run(root, nested=True)


def test_unreadable_directory_goes_to_error_dirs(make_tree, flaky_fs):
    root = make_tree({
        ".xignore": "**\n",
        "locked/secret.txt": "",
        "open/a.txt": "",
    })
    matcher = Matcher(flaky_fs(unreadable_dirs={"locked"}))
    result = matcher.matches(root, MatchesOptions(ignorefile=".xignore"))

    assert result.error_dirs == ["locked"]
    assert result.error_files == []
    assert "locked" not in result.matched_dirs
    assert native(["open/a.txt"])[0] in result.matched_files


def test_partition_error_is_recovered(make_tree, flaky_fs):
    root = make_tree({".xignore": "a.txt\n", "a.txt": "", "ghost.txt": ""})
    matcher = Matcher(flaky_fs(broken_stats={"ghost.txt"}))
    result = matcher.matches(root, MatchesOptions(ignorefile=".xignore"))

    assert result.error_files == ["ghost.txt"]
    assert result.error_dirs == []
    assert result.matched_files == ["a.txt"]
    assert result.unmatched_files == [".xignore"]
    assert result.has_errors


def test_partition_error_on_directory_goes_to_error_dirs(make_tree, flaky_fs):
    root = make_tree({".xignore": "a.txt\n", "a.txt": "", "d/b.txt": ""})
    matcher = Matcher(flaky_fs(broken_stats={"d"}))
    result = matcher.matches(root, MatchesOptions(ignorefile=".xignore"))

    assert result.error_dirs == ["d"]
    assert result.error_files == []
    assert result.unmatched_files == native([".xignore", "d/b.txt"])


@pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks not available")
def test_dangling_symlink_goes_to_error_files(make_tree):
    """A link to a missing target cannot be classified and is reported as a file"""
    root = make_tree({".xignore": "a.txt\n", "a.txt": ""})
    try:
        os.symlink(root / "gone", root / "link.txt")
    except (OSError, NotImplementedError):
        pytest.skip("cannot create symlinks here")

    result = run(root)
    assert result.error_files == ["link.txt"]
    assert result.error_dirs == []
    assert result.matched_files == ["a.txt"]
    assert "link.txt" not in result.unmatched_files


@pytest.mark.skipif(os.name == "nt", reason="file names cannot end in a space")
def test_escaped_trailing_space_matches_name_ending_in_space(make_tree):
    root = make_tree({".xignore": "foo\\ \n", "foo ": "", "foo": ""})
    result = run(root)
    assert result.matched_files == ["foo "]
    assert result.unmatched_files == [".xignore", "foo"]


def test_cascade_error_is_fatal(make_tree, flaky_fs):
    from xignore import MatchIOError

    root = make_tree({".xignore": "d\n", "d/a.txt": ""})
    matcher = Matcher(flaky_fs(broken_stats={"d"}))
    with pytest.raises(MatchIOError):
        matcher.matches(root, MatchesOptions(ignorefile=".xignore"))


def test_to_dict(make_tree):
    data = run(make_tree(SIMPLE)).to_dict()
    assert set(data) == {
        'base_dir', 'matched_files', 'unmatched_files', 'matched_dirs',
        'unmatched_dirs', 'error_files', 'error_dirs',
    }
    assert data['unmatched_files'] == ["rain.txt"]
