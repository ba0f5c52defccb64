"""Comment stripping and whitespace normalization applied before comparison."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

_HEREDOC_START_RE = re.compile(r"<<<[ \t]*(['\"]?)([A-Za-z_][A-Za-z0-9_]*)\1[ \t]*\r?\n")
_OPEN_TAG_RE = re.compile(r"^\s*<\?php\s*")
_HORIZONTAL_WS_RE = re.compile(r"[ \t]+")


@dataclass(slots=True, frozen=True)
class CommentSyntax:
    """Lexical markers for one content syntax.

    ``open_tags``/``close_tag`` delimit code regions inside markup. Text outside
    a code region is copied verbatim, except for ``markup_comment_pairs``.
    """

    name: str
    line_comment_prefixes: tuple[str, ...] = ()
    line_comment_excludes: tuple[str, ...] = ()
    block_comment_pairs: tuple[tuple[str, str], ...] = ()
    string_delimiters: tuple[str, ...] = ()
    escape_char: str = "\\"
    heredocs: bool = False
    open_tags: tuple[str, ...] = ()
    close_tag: str | None = None
    markup_comment_pairs: tuple[tuple[str, str], ...] = ()
    starts_in_markup: bool = False


PHP = CommentSyntax(
    name="php",
    line_comment_prefixes=("//", "#"),
    line_comment_excludes=("#[",),
    block_comment_pairs=(("/*", "*/"),),
    string_delimiters=("'", '"', "`"),
    heredocs=True,
    open_tags=("<?php", "<?="),
    close_tag="?>",
)
BLADE = replace(
    PHP,
    name="blade",
    markup_comment_pairs=(("{{--", "--}}"),),
    starts_in_markup=True,
)
JSON = CommentSyntax(name="json", string_delimiters=('"',))


def syntax_for_path(path: str) -> CommentSyntax:
    """Pick the comment syntax for ``path`` from its file name."""

    name = path.replace("\\", "/").rsplit("/", 1)[-1].lower()
    if name.endswith(".json"):
        return JSON
    if name.endswith(".blade.php"):
        return BLADE
    return PHP


def normalize(raw: str, apply_whitespace_policy: bool = False, syntax: CommentSyntax = PHP) -> str:
    """Return ``raw`` with comments removed and, optionally, whitespace normalized."""

    text = strip_comments(raw, syntax)
    if apply_whitespace_policy:
        text = normalize_whitespace(text)
    return text


def normalize_whitespace(text: str) -> str:
    """Drop a leading open tag, unify line endings and collapse blank runs."""

    text = _OPEN_TAG_RE.sub("", text, count=1)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _HORIZONTAL_WS_RE.sub(" ", text)
    return text.strip()


def strip_comments(text: str, syntax: CommentSyntax = PHP) -> str:
    """Remove comments from ``text`` without touching string literals.

    Blank space in front of a removed comment goes with it, and a line that
    only held comments is dropped entirely.
    """

    scanner = _CommentScanner(text, syntax)
    return scanner.run()


def _by_length(markers: tuple[str, ...]) -> tuple[str, ...]:
    return tuple(sorted((marker for marker in markers if marker), key=len, reverse=True))


class _CommentScanner:
    def __init__(self, text: str, syntax: CommentSyntax) -> None:
        self.text = text
        self.syntax = syntax
        self.line_prefixes = _by_length(syntax.line_comment_prefixes)
        self.open_tags = _by_length(syntax.open_tags)
        self.block_pairs = tuple(sorted(syntax.block_comment_pairs, key=lambda pair: len(pair[0]), reverse=True))
        self.string_delimiters = _by_length(syntax.string_delimiters)
        self.out: list[str] = []
        self.line = 0
        self.comment_lines: set[int] = set()

    def run(self) -> str:
        text = self.text
        length = len(text)
        index = 0
        in_code = not self._starts_in_markup()

        while index < length:
            if not in_code:
                index, in_code = self._scan_markup(index)
                continue

            syntax = self.syntax
            if syntax.close_tag and text.startswith(syntax.close_tag, index):
                self._emit(syntax.close_tag)
                index += len(syntax.close_tag)
                in_code = False
                continue

            prefix = self._match(index, self.line_prefixes)
            if prefix is not None and not self._match(index, syntax.line_comment_excludes):
                index = self._skip_line_comment(index + len(prefix))
                continue

            pair = self._match_pair(index, self.block_pairs)
            if pair is not None:
                index = self._skip_block_comment(index + len(pair[0]), pair[1])
                continue

            if syntax.heredocs:
                heredoc = _HEREDOC_START_RE.match(text, index)
                if heredoc is not None:
                    index = self._copy_heredoc(index, heredoc)
                    continue

            delimiter = self._match(index, self.string_delimiters)
            if delimiter is not None:
                index = self._copy_string(index, delimiter)
                continue

            self._emit(text[index])
            index += 1

        return self._drop_comment_only_lines("".join(self.out))

    # ------------------------------------------------------------------
    # Region handling

    def _starts_in_markup(self) -> bool:
        if self.syntax.starts_in_markup:
            return True
        if not self.open_tags:
            return False
        return any(tag in self.text for tag in self.open_tags)

    def _scan_markup(self, index: int) -> tuple[int, bool]:
        text = self.text
        tag = self._match(index, self.open_tags)
        if tag is not None:
            self._emit(tag)
            return index + len(tag), True

        pair = self._match_pair(index, self.syntax.markup_comment_pairs)
        if pair is not None:
            return self._skip_block_comment(index + len(pair[0]), pair[1], separate=False), False

        self._emit(text[index])
        return index + 1, False

    # ------------------------------------------------------------------
    # Comments

    def _skip_line_comment(self, index: int) -> int:
        text = self.text
        close_tag = self.syntax.close_tag
        self._mark_comment()
        while index < len(text) and text[index] not in "\r\n":
            if close_tag and text.startswith(close_tag, index):
                break
            index += 1
        return index

    def _skip_block_comment(self, index: int, end_marker: str, *, separate: bool = True) -> int:
        """Skip a block comment starting at ``index``.

        Blank space before the comment is dropped when blank space or a line
        end follows it. In code, a comment squeezed between two tokens leaves
        a single space so the tokens stay apart.
        """

        text = self.text
        end = text.find(end_marker, index)
        resume = len(text) if end == -1 else end + len(end_marker)
        following = text[resume] if resume < len(text) else "\n"

        if following in " \t\r\n":
            self._mark_comment()
            return resume

        self.comment_lines.add(self.line)
        if separate and not self._ends_with_blank():
            self._emit(" ")
        return resume

    def _mark_comment(self) -> None:
        while self.out:
            trimmed = self.out[-1].rstrip(" \t")
            if trimmed:
                self.out[-1] = trimmed
                break
            self.out.pop()
        self.comment_lines.add(self.line)

    def _ends_with_blank(self) -> bool:
        for chunk in reversed(self.out):
            if chunk:
                return chunk[-1] in " \t\r\n"
        return True

    def _drop_comment_only_lines(self, text: str) -> str:
        if not self.comment_lines:
            return text
        lines = text.split("\n")
        kept = [
            line for number, line in enumerate(lines) if number not in self.comment_lines or line.strip()
        ]
        return "\n".join(kept)

    # ------------------------------------------------------------------
    # Literals

    def _copy_string(self, index: int, delimiter: str) -> int:
        text = self.text
        escape = self.syntax.escape_char
        end = index + len(delimiter)
        while end < len(text):
            if escape and text[end] == escape:
                end += 2
                continue
            if text.startswith(delimiter, end):
                end += len(delimiter)
                break
            end += 1
        end = min(end, len(text))
        self._emit(text[index:end])
        return end

    def _copy_heredoc(self, index: int, start: re.Match[str]) -> int:
        identifier = re.escape(start.group(2))
        closing = re.compile(rf"^[ \t]*{identifier}(?![A-Za-z0-9_])", re.MULTILINE)
        found = closing.search(self.text, start.end())
        end = found.end() if found is not None else len(self.text)
        self._emit(self.text[index:end])
        return end

    # ------------------------------------------------------------------
    # Helpers

    def _emit(self, chunk: str) -> None:
        self.out.append(chunk)
        self.line += chunk.count("\n")

    def _match(self, index: int, markers: tuple[str, ...]) -> str | None:
        for marker in markers:
            if self.text.startswith(marker, index):
                return marker
        return None

    def _match_pair(self, index: int, pairs: tuple[tuple[str, str], ...]) -> tuple[str, str] | None:
        for pair in pairs:
            if self.text.startswith(pair[0], index):
                return pair
        return None
