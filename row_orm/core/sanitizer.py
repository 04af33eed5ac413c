"""Inline SQL handling for the raw-query escape hatch.

Only applied to SQL strings passed to ``execute_raw_query``. SQL generated
from entity metadata never passes through here.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from row_orm.core.exceptions import SQLSanitizationError

# Matches the first SQL keyword (used for verb allow-listing)
_FIRST_KEYWORD = re.compile(r"^\s*(\w+)")

# Words and the name that may follow FROM
_WORD = re.compile(r"[A-Za-z_]\w*")
_NAME_AFTER_FROM = re.compile(r"\s+([A-Za-z_]\w*)(?!\w)")
_OPEN_PAREN = re.compile(r"\s*\(")
_SUBQUERY_START = re.compile(r"\s*(SELECT|WITH)\b", re.IGNORECASE)

# Words that may follow FROM without naming a table
_NOT_TABLES = frozenset({"DUAL", "ONLY", "LATERAL"})

# Opening character → token kind
_QUOTES = {"'": "string", '"': "identifier", "`": "identifier"}


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------


def tokenize(sql: str) -> list[tuple[str, str]]:
    """Split *sql* into ``('string', …)``, ``('identifier', …)`` and ``('code', …)`` tokens.

    Single-quoted literals, double-quoted identifiers and backtick-quoted
    identifiers are kept intact, with doubled quote characters as escapes.

    Raises:
        SQLSanitizationError: On an unterminated literal or identifier.
    """
    tokens: list[tuple[str, str]] = []
    i = last = 0
    n = len(sql)

    while i < n:
        quote = sql[i]
        if quote not in _QUOTES:
            i += 1
            continue
        if i > last:
            tokens.append(("code", sql[last:i]))
        j = i + 1
        while True:
            j = sql.find(quote, j)
            if j == -1:
                raise SQLSanitizationError(f"Unterminated {_QUOTES[quote]} starting at offset {i}")
            if sql[j + 1 : j + 2] == quote:
                j += 2  # doubled quote escape
                continue
            break
        tokens.append((_QUOTES[quote], sql[i : j + 1]))
        i = last = j + 1

    if last < n:
        tokens.append(("code", sql[last:]))
    return tokens


def _map_code(sql: str, transform: Callable[[str], str]) -> str:
    """Apply *transform* to code tokens only."""
    return "".join(
        transform(content) if kind == "code" else content for kind, content in tokenize(sql)
    )


def _table_spans(code: str) -> list[tuple[int, int]]:
    """Offsets of bare table names that follow a query-level FROM.

    *code* is the SQL with literals and quoted identifiers masked out. A FROM
    inside a function call (``EXTRACT(YEAR FROM x)``, ``TRIM(... FROM x)``)
    or after ``IS [NOT] DISTINCT`` is not a table clause; a FROM inside a
    parenthesised SELECT or WITH is. Names followed by ``(`` are table
    functions and keywords such as DUAL are left as written.
    """
    spans: list[tuple[int, int]] = []
    subquery_parens: list[bool] = []
    prev_word = ""
    i, n = 0, len(code)

    while i < n:
        ch = code[i]
        if ch == "(":
            subquery_parens.append(_SUBQUERY_START.match(code, i + 1) is not None)
            prev_word = ""
            i += 1
            continue
        if ch == ")":
            if subquery_parens:
                subquery_parens.pop()
            prev_word = ""
            i += 1
            continue

        m = _WORD.match(code, i)
        if m is None:
            if not ch.isspace():
                prev_word = ""
            i += 1
            continue

        word = m.group().upper()
        i = m.end()
        query_level = not subquery_parens or subquery_parens[-1]
        if word == "FROM" and query_level and prev_word != "DISTINCT":
            name = _NAME_AFTER_FROM.match(code, i)
            if (
                name is not None
                and name.group(1).upper() not in _NOT_TABLES
                and _OPEN_PAREN.match(code, name.end()) is None
            ):
                spans.append(name.span(1))
        prev_word = word

    return spans


def quote_from_tables(sql: str, quote_identifier: Callable[[str], str]) -> str:
    """Quote bare ``FROM <name>`` table references outside literals."""
    # Same-length mask keeps offsets aligned with the original text.
    masked = "".join(
        content if kind == "code" else "\0" * len(content) for kind, content in tokenize(sql)
    )
    parts: list[str] = []
    last = 0
    for start, end in _table_spans(masked):
        parts.append(sql[last:start])
        parts.append(quote_identifier(sql[start:end]))
        last = end
    parts.append(sql[last:])
    return "".join(parts)


# ---------------------------------------------------------------------------
# Individual sanitization checks
# ---------------------------------------------------------------------------


def _strip_comments_in_code(code: str) -> str:
    """Remove ``--`` line comments and ``/* */`` block comments from a code segment."""
    code = re.sub(r"/\*.*?(\*/|$)", " ", code, flags=re.DOTALL)
    return re.sub(r"--[^\n]*", "", code)


def _strip_comments(sql: str) -> str:
    """Remove SQL comments while preserving string literals and identifiers."""
    return _map_code(sql, _strip_comments_in_code)


def _check_single_statement(sql: str) -> None:
    """Raise if *sql* contains a semicolon followed by non-whitespace content."""
    code = "".join(c if kind == "code" else " " for kind, c in tokenize(sql))
    head, sep, tail = code.partition(";")
    if sep and tail.strip(" ;\n\t"):
        raise SQLSanitizationError("Multiple SQL statements are not permitted in inline SQL")


def _check_verb(sql: str, allowed: frozenset[str]) -> None:
    """Raise if the leading SQL keyword is not in *allowed*."""
    m = _FIRST_KEYWORD.match(sql)
    if m:
        verb = m.group(1).upper()
        if verb not in allowed:
            raise SQLSanitizationError(
                f"SQL verb '{verb}' is not permitted; allowed: {sorted(allowed)}"
            )


# ---------------------------------------------------------------------------
# Public class
# ---------------------------------------------------------------------------


@dataclass
class SQLSanitizer:
    """Configurable sanitizer for raw SQL strings.

    This is defense in depth, not injection protection: values must still be
    passed as parameters rather than concatenated into the SQL.

    Attributes:
        strip_comments: Strip ``--`` and ``/* */`` comments before execution.
        block_multiple_statements: Reject SQL with a ``;`` followed by more
            content, e.g. ``SELECT 1; DROP TABLE users``.
        allowed_verbs: If not ``None``, only statements whose first keyword is
            in this set are permitted, e.g. ``frozenset({"SELECT"})``.
    """

    strip_comments: bool = True
    block_multiple_statements: bool = True
    allowed_verbs: frozenset[str] | None = None

    def sanitize(self, sql: str) -> str:
        """Apply all configured checks to *sql* and return the (cleaned) SQL.

        Raises:
            SQLSanitizationError: If any enabled check fails.
        """
        if self.strip_comments:
            sql = _strip_comments(sql)
        if self.block_multiple_statements:
            _check_single_statement(sql)
        if self.allowed_verbs is not None:
            _check_verb(sql, self.allowed_verbs)
        return sql
