"""Pytest configuration for sqlpolish tests."""

import os
import tempfile
from typing import Callable, Generator

import pytest

from sqlpolish.formatter.config import FormatterConfig
from sqlpolish.formatter.engine import FormatterEngine


@pytest.fixture
def temp_dir() -> Generator[str, None, None]:
    """Create a temporary directory for tests.

    Yields
    ------
        Path to the temporary directory

    """
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield tmp_dir


@pytest.fixture
def write_sql(temp_dir: str) -> Callable[[str, str], str]:
    """Return a helper that writes a SQL file into the temp directory.

    Returns
    -------
        Function taking (file name, content) and returning the file path

    """

    def _write(name: str, content: str) -> str:
        path = os.path.join(temp_dir, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    return _write


@pytest.fixture
def default_config() -> FormatterConfig:
    """Return the default formatter configuration."""
    return FormatterConfig()


@pytest.fixture
def engine(default_config: FormatterConfig) -> FormatterEngine:
    """Return an engine with the default configuration."""
    return FormatterEngine(default_config)


@pytest.fixture
def sample_queries() -> dict:
    """Return a set of representative SQL statements.

    Returns
    -------
        Mapping of scenario name to SQL text

    """
    return {
        "simple_select": "select a,b from t",
        "join": "SELECT u.id, o.total FROM users u INNER JOIN orders o ON u.id = o.user_id WHERE u.active = 1 AND o.total > 10",
        "cte": "WITH cte1 AS (SELECT * FROM t1), cte2 AS (SELECT * FROM t2) SELECT * FROM cte1 JOIN cte2 ON cte1.id = cte2.id",
        "case_subquery": "SELECT CASE WHEN (SELECT 1) > 0 THEN 1 END",
        "merge": "MERGE INTO target AS t USING source AS s ON t.id = s.id WHEN MATCHED THEN UPDATE SET t.x = s.x WHEN NOT MATCHED THEN INSERT (id, x) VALUES (s.id, s.x);",
        "insert_values": "INSERT INTO t (a, b) VALUES (1, 2), (3, 4)",
        "update": "UPDATE t SET a = 1, b = 2 WHERE id = 3",
        "create_table": "CREATE TABLE t (id INT, name VARCHAR(50))",
        "batches": "SELECT 1;\nGO\nSELECT 2",
        "window": "SELECT ROW_NUMBER() OVER (PARTITION BY a ORDER BY b) AS rn FROM t",
        "exists": "SELECT * FROM t WHERE EXISTS (SELECT 1 FROM u WHERE u.id = t.id)",
        "procedure": "CREATE PROCEDURE p AS BEGIN SET NOCOUNT ON; SELECT @x = COUNT(*) FROM t; END",
        "comments": "-- header\nSELECT a, -- first\n    b /* second */\nFROM t",
        "broken": "SELECT (a, 'unterminated FROM [t",
    }
