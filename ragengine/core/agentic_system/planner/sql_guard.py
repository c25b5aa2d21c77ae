"""
Read-only SQL guard.

Accepts a single pure SELECT whose FROM/JOIN targets are limited to the
user-scoped views. Anything else raises SecurityViolation before the
statement reaches the database.

System role: Query validation for the read-only query tool
"""

import re

from ragengine.core.exceptions import SecurityViolation

USER_SCOPED_VIEWS = frozenset({"user_messages", "user_sessions", "user_documents"})

FORBIDDEN_KEYWORDS = frozenset(
    {
        "insert", "update", "delete", "drop", "alter", "create", "replace",
        "truncate", "attach", "detach", "pragma", "vacuum", "grant", "revoke",
        "copy", "into", "merge", "call", "exec", "execute", "lock", "set",
        "reindex", "analyze", "with", "returning", "load_extension",
        "pg_sleep", "pg_read_file", "pg_read_binary_file", "pg_ls_dir",
        "lo_import", "lo_export", "lo_get", "dblink", "dblink_exec",
        "query_to_xml", "query_to_xmlschema", "query_to_xml_and_xmlschema",
        "cursor_to_xml", "cursor_to_xmlschema", "table_to_xml", "table_to_xmlschema",
        "table_to_xml_and_xmlschema", "schema_to_xml", "database_to_xml",
        "crosstab", "xpath_table", "current_setting", "set_config",
    }
)

_STRING_LITERAL = re.compile(r"'(?:[^']|'')*'")
_QUOTED_IDENTIFIER = re.compile(r'"(?:[^"]|"")*"|`[^`]*`|\[[^\]]*\]')
_WORD = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*")
_TOKEN = re.compile(r"[A-Za-z_][A-Za-z0-9_$]*|''|\S")
_FROM_LIST_END = frozenset(
    {
        "select", "where", "group", "order", "limit", "offset", "having",
        "window", "union", "intersect", "except",
    }
)

TOOL_NAME = "read_only_query"


def _reject(reason: str, sql: str) -> SecurityViolation:
    return SecurityViolation(reason, tool_name=TOOL_NAME, details={"sql": sql})


def normalize_select(sql: str) -> str:
    """
    Validate a query and return it without a trailing semicolon.

    Raises:
        SecurityViolation: Not a single SELECT over the user-scoped views
    """
    if not sql or not sql.strip():
        raise _reject("Query is empty", sql)

    statement = sql.strip()
    if statement.endswith(";"):
        statement = statement[:-1].rstrip()

    if "--" in statement or "/*" in statement or "*/" in statement:
        raise _reject("Comments are not allowed", sql)

    # Literals are blanked so their contents cannot trip the keyword scan.
    scanned = _STRING_LITERAL.sub("''", statement)
    if "'" in scanned:
        raise _reject("Unterminated string literal", sql)
    if _QUOTED_IDENTIFIER.search(scanned):
        raise _reject("Quoted identifiers are not allowed", sql)
    if ";" in scanned:
        raise _reject("Only a single statement is allowed", sql)

    words = [w.lower() for w in _WORD.findall(scanned)]
    if not words or words[0] != "select":
        raise _reject("Only SELECT statements are allowed", sql)

    forbidden = sorted(set(words) & FORBIDDEN_KEYWORDS)
    if forbidden:
        raise _reject(f"Forbidden keyword(s): {', '.join(forbidden)}", sql)

    targets = _referenced_relations(scanned, sql)
    if not targets:
        raise _reject("Query must read from a user-scoped view", sql)
    disallowed = sorted({t for t in targets if t not in USER_SCOPED_VIEWS})
    if disallowed:
        raise _reject(
            f"Only {', '.join(sorted(USER_SCOPED_VIEWS))} may be queried, got: {', '.join(disallowed)}",
            sql,
        )
    return statement


def _referenced_relations(scanned: str, sql: str) -> list[str]:
    """
    Collect the relation named by every FROM item and JOIN target.

    Each parenthesis opens a new scope so subqueries are checked on their
    own. A parenthesized FROM item must be a subquery; parenthesized joins
    and table functions are rejected.
    """
    tokens = _TOKEN.findall(scanned)
    relations: list[str] = []
    # One flag per open parenthesis: whether that scope is inside a FROM list.
    in_from = [False]

    def take_target(position: int) -> None:
        if position >= len(tokens):
            raise _reject("FROM or JOIN without a relation", sql)
        target = tokens[position]
        if target == "(":
            following = tokens[position + 1].lower() if position + 1 < len(tokens) else ""
            if following != "select":
                raise _reject("Parenthesized FROM items must be subqueries", sql)
            return
        if not _WORD.fullmatch(target):
            raise _reject(f"Unexpected FROM item: {target}", sql)
        if position + 1 < len(tokens) and tokens[position + 1] in ("(", "."):
            views = ", ".join(sorted(USER_SCOPED_VIEWS))
            raise _reject(f"Only {views} may be queried, got: {target.lower()}", sql)
        relations.append(target.lower())

    for position, token in enumerate(tokens):
        lowered = token.lower()
        if token == "(":
            in_from.append(False)
        elif token == ")":
            if len(in_from) > 1:
                in_from.pop()
        elif lowered == "from":
            in_from[-1] = True
            take_target(position + 1)
        elif lowered == "join":
            take_target(position + 1)
        elif token == "," and in_from[-1]:
            take_target(position + 1)
        elif lowered in _FROM_LIST_END:
            in_from[-1] = False
    return relations
