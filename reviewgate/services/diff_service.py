"""Diff service — line-level Myers diff grouped into unified-diff hunks.

Lines are compared exactly (case and whitespace sensitive). A line keeps its
trailing newline as part of its identity, so ``"C"`` at end of file and
``"C\\n"`` are different lines, the same way ``diff -u`` reports
"No newline at end of file".
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from reviewgate.schemas.diff import DiffChunk, DiffLine, DiffResult

Opcode = tuple[str, int, int, int, int]


def split_lines(text: str) -> list[str]:
    """Split *text* into lines, each keeping its ``\\n`` terminator."""
    if not text:
        return []
    lines = [line + "\n" for line in text.split("\n")]
    last = lines.pop()
    if last != "\n":
        # Final line has no terminator
        lines.append(last[:-1])
    return lines


def _myers(a: Sequence[str], b: Sequence[str]) -> list[str]:
    """Shortest edit script from *a* to *b* as a list of equal/delete/insert steps."""
    n, m = len(a), len(b)
    v = {1: 0}
    trace: list[dict[int, int]] = []

    for d in range(n + m + 1):
        trace.append(v.copy())
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[k - 1] < v[k + 1]):
                x = v[k + 1]
            else:
                x = v[k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[k] = x
            if x >= n and y >= m:
                return _backtrack(trace, n, m)
    return []  # unreachable: d == n + m always terminates


def _backtrack(trace: list[dict[int, int]], n: int, m: int) -> list[str]:
    x, y = n, m
    steps: list[str] = []
    for d in range(len(trace) - 1, -1, -1):
        v = trace[d]
        k = x - y
        if k == -d or (k != d and v[k - 1] < v[k + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = v[prev_k]
        prev_y = prev_x - prev_k

        while x > prev_x and y > prev_y:
            steps.append("equal")
            x -= 1
            y -= 1
        if d > 0:
            steps.append("insert" if x == prev_x else "delete")
        x, y = prev_x, prev_y

    steps.reverse()
    return steps


def opcodes(a: Sequence[str], b: Sequence[str]) -> list[Opcode]:
    """Collapse the edit script into difflib-style ``(tag, i1, i2, j1, j2)`` blocks.

    Any run of deletions and insertions between two equal runs becomes a
    single ``replace`` block (or a pure ``delete`` / ``insert``).
    """
    codes: list[Opcode] = []
    i = j = 0
    block_i, block_j = 0, 0
    block_tag: str | None = None

    def flush() -> None:
        if block_tag is None:
            return
        if block_tag == "equal":
            tag = "equal"
        elif i > block_i and j > block_j:
            tag = "replace"
        elif i > block_i:
            tag = "delete"
        else:
            tag = "insert"
        codes.append((tag, block_i, i, block_j, j))

    for step in _myers(a, b):
        kind = "equal" if step == "equal" else "change"
        if kind != block_tag:
            flush()
            block_tag, block_i, block_j = kind, i, j
        if step == "equal":
            i += 1
            j += 1
        elif step == "delete":
            i += 1
        else:
            j += 1
    flush()
    return codes


def _grouped(codes: list[Opcode], context: int) -> Iterator[list[Opcode]]:
    """Split opcodes into hunks with up to *context* unchanged lines around each change."""
    if not any(tag != "equal" for tag, *_ in codes):
        return

    codes = list(codes)
    tag, i1, i2, j1, j2 = codes[0]
    if tag == "equal":
        codes[0] = tag, max(i1, i2 - context), i2, max(j1, j2 - context), j2
    tag, i1, i2, j1, j2 = codes[-1]
    if tag == "equal":
        codes[-1] = tag, i1, min(i2, i1 + context), j1, min(j2, j1 + context)

    group: list[Opcode] = []
    for tag, i1, i2, j1, j2 in codes:
        # Long unchanged stretch: close this hunk, open the next one
        if tag == "equal" and i2 - i1 > context * 2:
            group.append((tag, i1, min(i2, i1 + context), j1, min(j2, j1 + context)))
            yield group
            group = []
            i1, j1 = max(i1, i2 - context), max(j1, j2 - context)
        group.append((tag, i1, i2, j1, j2))
    if group and not (len(group) == 1 and group[0][0] == "equal"):
        yield group


def _line(kind: str, text: str, old_no: int | None, new_no: int | None) -> DiffLine:
    no_eol = not text.endswith("\n")
    return DiffLine(
        type=kind,
        old_line_number=old_no,
        new_line_number=new_no,
        content=text if no_eol else text[:-1],
        no_eol=no_eol,
    )


def _build_chunk(a: list[str], b: list[str], group: list[Opcode]) -> DiffChunk:
    first, last = group[0], group[-1]
    old_lines = last[2] - first[1]
    new_lines = last[4] - first[3]
    # Empty side points at the line before the hunk (unified diff convention)
    old_start = first[1] + 1 if old_lines else first[1]
    new_start = first[3] + 1 if new_lines else first[3]

    lines: list[DiffLine] = []
    for tag, i1, i2, j1, j2 in group:
        if tag == "equal":
            for offset in range(i2 - i1):
                lines.append(_line("normal", a[i1 + offset], i1 + offset + 1, j1 + offset + 1))
            continue
        for i in range(i1, i2):
            lines.append(_line("delete", a[i], i + 1, None))
        for j in range(j1, j2):
            lines.append(_line("add", b[j], None, j + 1))

    return DiffChunk(
        old_start=old_start,
        old_lines=old_lines,
        new_start=new_start,
        new_lines=new_lines,
        lines=lines,
    )


def diff(old_content: str, new_content: str, context: int = 3) -> DiffResult:
    """Compute the line diff between two texts."""
    a = split_lines(old_content)
    b = split_lines(new_content)
    codes = opcodes(a, b)

    result = DiffResult()
    for tag, i1, i2, j1, j2 in codes:
        if tag in ("replace", "delete"):
            result.deletions += i2 - i1
        if tag in ("replace", "insert"):
            result.additions += j2 - j1
        if tag == "replace":
            result.changes += min(i2 - i1, j2 - j1)

    result.chunks = [_build_chunk(a, b, group) for group in _grouped(codes, context)]
    return result


def apply_chunks(old_content: str, result: DiffResult) -> str:
    """Rebuild the new text from *old_content* and the hunks of *result*."""
    a = split_lines(old_content)
    out: list[str] = []
    cursor = 0
    for chunk in result.chunks:
        start = chunk.old_start - 1 if chunk.old_lines else chunk.old_start
        out.extend(a[cursor:start])
        for line in chunk.lines:
            if line.type == "normal":
                out.append(a[line.old_line_number - 1])
            elif line.type == "add":
                out.append(line.content if line.no_eol else line.content + "\n")
        cursor = start + chunk.old_lines
    out.extend(a[cursor:])
    return "".join(out)


def format_unified(result: DiffResult, from_label: str = "a", to_label: str = "b") -> str:
    """Render *result* as ``diff -u`` text."""
    if not result.chunks:
        return ""
    out = [f"--- {from_label}", f"+++ {to_label}"]
    prefixes = {"normal": " ", "delete": "-", "add": "+"}
    for chunk in result.chunks:
        out.append(
            f"@@ -{chunk.old_start},{chunk.old_lines} +{chunk.new_start},{chunk.new_lines} @@"
        )
        for line in chunk.lines:
            out.append(prefixes[line.type] + line.content)
            if line.no_eol:
                out.append("\\ No newline at end of file")
    return "\n".join(out) + "\n"
