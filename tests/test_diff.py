"""Diff engine tests."""

from reviewgate.services.diff_service import apply_chunks, diff, format_unified, split_lines


def test_split_lines_keeps_terminators():
    assert split_lines("") == []
    assert split_lines("A\nB\n") == ["A\n", "B\n"]
    assert split_lines("A\nB") == ["A\n", "B"]
    assert split_lines("\n") == ["\n"]


def test_identical_content_has_no_changes():
    result = diff("A\nB\nC\n", "A\nB\nC\n")
    assert (result.additions, result.deletions, result.changes) == (0, 0, 0)
    assert result.chunks == []


def test_single_line_replacement():
    result = diff("A\nB\nC\n", "A\nX\nC\n")
    assert result.additions == 1
    assert result.deletions == 1
    assert result.changes == 1
    assert len(result.chunks) == 1

    chunk = result.chunks[0]
    assert (chunk.old_start, chunk.old_lines, chunk.new_start, chunk.new_lines) == (1, 3, 1, 3)
    assert [(line.type, line.content) for line in chunk.lines] == [
        ("normal", "A"),
        ("delete", "B"),
        ("add", "X"),
        ("normal", "C"),
    ]
    deleted = next(line for line in chunk.lines if line.type == "delete")
    added = next(line for line in chunk.lines if line.type == "add")
    assert deleted.old_line_number == 2 and deleted.new_line_number is None
    assert added.new_line_number == 2 and added.old_line_number is None


def test_pure_insertion_at_start_points_before_first_line():
    result = diff("B\n", "A\nB\n", context=0)
    chunk = result.chunks[0]
    assert (chunk.old_start, chunk.old_lines, chunk.new_start, chunk.new_lines) == (0, 0, 1, 1)
    assert result.additions == 1 and result.deletions == 0 and result.changes == 0


def test_distant_changes_produce_separate_hunks():
    old = "".join(f"line {i}\n" for i in range(1, 21))
    new = old.replace("line 2\n", "line two\n").replace("line 19\n", "line nineteen\n")
    result = diff(old, new, context=3)
    assert len(result.chunks) == 2
    assert result.chunks[0].old_start == 1
    assert result.chunks[1].old_start == 16
    assert result.changes == 2


def test_nearby_changes_merge_into_one_hunk():
    old = "".join(f"{i}\n" for i in range(10))
    new = old.replace("2\n", "two\n").replace("6\n", "six\n")
    result = diff(old, new, context=3)
    assert len(result.chunks) == 1


def test_case_and_whitespace_are_significant():
    result = diff("alpha\nbeta\n", "Alpha\nbeta \n")
    assert result.deletions == 2
    assert result.additions == 2


def test_missing_trailing_newline_is_a_change():
    result = diff("A\nB\n", "A\nB")
    assert result.deletions == 1 and result.additions == 1
    added = [line for line in result.chunks[0].lines if line.type == "add"]
    assert added[0].content == "B" and added[0].no_eol is True


def test_round_trip_rebuilds_new_text():
    cases = [
        ("A\nB\nC\n", "A\nX\nC\n"),
        ("", "first\nsecond\n"),
        ("gone\nalso gone\n", ""),
        ("a\nb\nc\nd\ne\nf\ng\nh\ni\nj\n", "a\nB\nc\nd\ne\nf\ng\nh\nI\nj\nk\n"),
        ("# Title\n\nBody\n", "# Title\n\nBody\nMore"),
        ("x\ny\nx\ny\nx\n", "y\nx\ny\nx\ny\n"),
    ]
    for old, new in cases:
        assert apply_chunks(old, diff(old, new)) == new
        assert apply_chunks(old, diff(old, new, context=0)) == new


def test_diff_is_deterministic():
    old = "a\nb\na\nb\na\n"
    new = "b\na\nb\na\nb\n"
    first = diff(old, new).model_dump()
    for _ in range(5):
        assert diff(old, new).model_dump() == first


def test_format_unified():
    text = format_unified(diff("A\nB\nC\n", "A\nX\nC\n"), "v1", "current")
    assert text.splitlines() == [
        "--- v1",
        "+++ current",
        "@@ -1,3 +1,3 @@",
        " A",
        "-B",
        "+X",
        " C",
    ]
    assert format_unified(diff("A\n", "A\n")) == ""
