"""
Test suite for the read-only query guard.

System role: Verification of agent SQL safety checks
"""

import pytest

from ragengine.core.agentic_system.planner.sql_guard import normalize_select
from ragengine.core.exceptions import SecurityViolation


class TestAcceptedQueries:
    @pytest.mark.parametrize(
        "sql",
        [
            "SELECT COUNT(*) AS message_count FROM user_messages",
            "select role, count(*) from user_messages group by role order by role",
            "SELECT s.id, m.content FROM user_sessions s JOIN user_messages m ON m.session_id = s.id",
            "SELECT name FROM user_documents WHERE status = 'processed' LIMIT 10",
            "SELECT content FROM user_messages WHERE content LIKE '%delete from sessions%'",
            "SELECT id FROM user_sessions WHERE id IN (SELECT session_id FROM user_messages)",
            "SELECT q.id FROM (SELECT id FROM user_sessions) AS q, user_messages m WHERE m.session_id = q.id",
            "SELECT id FROM user_sessions WHERE id IN ('a', 'b') ORDER BY id",
        ],
    )
    def test_select_over_user_views_should_pass(self, sql: str) -> None:
        assert normalize_select(sql) == sql

    def test_trailing_semicolon_should_be_stripped(self) -> None:
        assert normalize_select("SELECT id FROM user_sessions;  ") == "SELECT id FROM user_sessions"


class TestRejectedQueries:
    """Every rejection is a SecurityViolation attributed to the query tool."""

    @pytest.mark.parametrize(
        ("sql", "reason"),
        [
            ("", "empty"),
            ("DELETE FROM user_messages", "Only SELECT"),
            ("SELECT * FROM sessions", "Only user_documents"),
            ("SELECT * FROM messages JOIN user_sessions ON 1 = 1", "Only user_documents"),
            ("SELECT * FROM user_sessions JOIN documents ON 1 = 1", "Only user_documents"),
            ("SELECT * FROM user_sessions; DROP TABLE sessions", "single statement"),
            ("SELECT * FROM user_sessions -- hidden", "Comments"),
            ("SELECT * FROM user_sessions /* hidden */", "Comments"),
            ('SELECT * FROM "sessions"', "Quoted identifiers"),
            ("SELECT * FROM user_sessions WHERE id = 'open", "Unterminated"),
            ("WITH x AS (SELECT 1) SELECT * FROM x", "Only SELECT"),
            ("SELECT * INTO copy FROM user_sessions", "Forbidden"),
            ("SELECT pg_sleep(10) FROM user_sessions", "Forbidden"),
            ("SELECT 1", "user-scoped view"),
            (
                "SELECT s.user_id FROM user_sessions u0, (sessions s CROSS JOIN user_sessions u)",
                "Parenthesized FROM items",
            ),
            ("SELECT * FROM (sessions) AS s", "Parenthesized FROM items"),
            ("SELECT * FROM user_sessions u JOIN (messages m JOIN user_messages x ON 1 = 1) ON 1 = 1", "Parenthesized"),
            ("SELECT * FROM user_sessions u JOIN user_messages m ON m.session_id = u.id, sessions", "Only user_documents"),
            ("SELECT * FROM (SELECT id FROM user_sessions) AS q, documents", "Only user_documents"),
            ("SELECT (SELECT user_id FROM sessions LIMIT 1) FROM user_sessions", "Only user_documents"),
            ("SELECT * FROM main.sessions", "Only user_documents"),
            ("SELECT * FROM generate_series(1, 3)", "Only user_documents"),
            (
                "SELECT query_to_xml('select user_id from sessions', true, false, '') FROM user_sessions",
                "Forbidden",
            ),
            ("SELECT cursor_to_xml('c', 10, false, false, '') FROM user_sessions", "Forbidden"),
        ],
    )
    def test_unsafe_query_should_be_rejected(self, sql: str, reason: str) -> None:
        with pytest.raises(SecurityViolation, match=reason) as exc_info:
            normalize_select(sql)

        assert exc_info.value.kind == "SecurityViolation"
