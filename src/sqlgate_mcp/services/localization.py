"""Localized tool descriptions.

Descriptions are looked up by message id in a per-locale catalog. Locale
identifiers accept both ``zh-CN`` and ``zh_CN`` forms; anything unknown falls
back to English, and ids missing from a catalog fall back to the English text.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

from babel import Locale, UnknownLocaleError

DEFAULT_LOCALE: Final[str] = "en"

Translator = Callable[[str], str]

MESSAGES: Final[dict[str, dict[str, str]]] = {
    "en": {
        "list_database": "List all databases on the server",
        "list_table": "List all tables (schema and name) in the current database",
        "create_table": "Create a new table in the database",
        "create_table_query": "The CREATE TABLE statement to execute",
        "alter_table": "Alter an existing table in the database",
        "alter_table_query": "The ALTER TABLE statement to execute",
        "desc_table": "Describe the structure of a table as a CREATE TABLE statement",
        "desc_table_name": "The name of the table to describe, optionally schema-qualified",
        "read_query": "Execute a read-only SELECT query and return the rows as CSV",
        "count_query": "Count the rows of a table",
        "count_query_name": "The name of the table to count, optionally schema-qualified",
        "write_query": "Execute an INSERT statement",
        "update_query": "Execute an UPDATE statement",
        "delete_query": "Execute a DELETE statement",
        "query_description": "The SQL statement to execute",
    },
    "zh_CN": {
        "list_database": "列出服务器上的所有数据库",
        "list_table": "列出当前数据库中的所有表（模式和表名）",
        "create_table": "在数据库中创建新表",
        "create_table_query": "要执行的 CREATE TABLE 语句",
        "alter_table": "修改数据库中已有的表",
        "alter_table_query": "要执行的 ALTER TABLE 语句",
        "desc_table": "以 CREATE TABLE 语句的形式描述表结构",
        "desc_table_name": "要描述的表名，可带模式前缀",
        "read_query": "执行只读 SELECT 查询，并以 CSV 格式返回结果",
        "count_query": "统计表的行数",
        "count_query_name": "要统计的表名，可带模式前缀",
        "write_query": "执行 INSERT 语句",
        "update_query": "执行 UPDATE 语句",
        "delete_query": "执行 DELETE 语句",
        "query_description": "要执行的 SQL 语句",
    },
}


def resolve_locale(lang: str | None) -> str:
    """Return the catalog key for a language tag, defaulting to English."""
    if not lang:
        return DEFAULT_LOCALE
    try:
        locale = Locale.parse(lang.replace("-", "_"))
    except (UnknownLocaleError, ValueError, TypeError):
        return DEFAULT_LOCALE

    # Most specific first: zh_Hans_CN, zh_CN, zh
    candidates = [
        str(locale),
        "_".join(p for p in (locale.language, locale.script, locale.territory) if p),
        "_".join(p for p in (locale.language, locale.territory) if p),
        locale.language,
    ]
    for candidate in candidates:
        if candidate in MESSAGES:
            return candidate
    return DEFAULT_LOCALE


def get_translator(lang: str | None) -> Translator:
    """Build a message lookup for ``lang``."""
    catalog = MESSAGES[resolve_locale(lang)]
    fallback = MESSAGES[DEFAULT_LOCALE]

    def translate(message_id: str) -> str:
        return catalog.get(message_id) or fallback.get(message_id, message_id)

    return translate
