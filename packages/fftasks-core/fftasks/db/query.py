"""
Query builder for the tasks table.

Filters and orderings are small typed objects compiled into
parameterized statements. User-supplied values only ever travel as
parameters; column names are checked against COLUMNS.

Placeholders are emitted in $1, $2 style, each used once and in
parameter order, so the SQLite adapter can rewrite them to ?.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from fftasks.errors import ValidationError
from fftasks.models.task import ALL, PRIORITY_RANK, validate_priority, validate_status

logger = logging.getLogger(__name__)

TABLE = "ff_tasks"

COLUMNS = (
    "id",
    "title",
    "description",
    "status",
    "priority",
    "category",
    "tags",
    "created_at",
    "updated_at",
    "due_date",
    "completed_at",
)

# Columns an update may touch directly, in SET order
UPDATABLE_COLUMNS = ("status", "priority", "description", "due_date")

LIKE_ESCAPE = "\\"

# Registered on SQLite connections; the built-in LOWER() only folds ASCII
SQLITE_LOWER = "unicode_lower"


class SortKey(str, Enum):
    """Orderings for list queries. Every one ends with a deterministic tie-break."""

    PRIORITY = "priority"
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"

    @classmethod
    def parse(cls, value: Union[str, "SortKey"]) -> "SortKey":
        if isinstance(value, cls):
            return value
        aliases = {"createdAt": "created_at", "updatedAt": "updated_at"}
        try:
            return cls(aliases.get(value, value))
        except ValueError:
            raise ValidationError(
                f"Invalid sort '{value}'. Must be one of: {', '.join(k.value for k in cls)}"
            )


class SearchField(str, Enum):
    """Which field(s) a text search looks at."""

    TITLE = "title"
    DESCRIPTION = "description"
    TAGS = "tags"
    BOTH = "both"

    @classmethod
    def parse(cls, value: Union[str, "SearchField"]) -> "SearchField":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValidationError(
                f"Invalid search field '{value}'. Must be one of: {', '.join(f.value for f in cls)}"
            )


def _priority_rank_sql() -> str:
    whens = " ".join(
        f"WHEN '{name}' THEN {rank}"
        for name, rank in sorted(PRIORITY_RANK.items(), key=lambda item: item[1])
    )
    return f"CASE priority {whens} ELSE {len(PRIORITY_RANK)} END"


ORDERINGS = {
    SortKey.PRIORITY: f"{_priority_rank_sql()}, created_at DESC, id",
    SortKey.CREATED_AT: "created_at DESC, id",
    SortKey.UPDATED_AT: "updated_at DESC, id",
}


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the text matches literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _lower(dialect: str) -> str:
    return SQLITE_LOWER if dialect == "sqlite" else "LOWER"


def _check_column(column: str) -> str:
    if column not in COLUMNS:
        raise ValueError(f"Unknown column: {column}")
    return column


class _Params:
    """Collects parameter values and hands out their placeholders."""

    def __init__(self):
        self.values: List[Any] = []

    def add(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


# =============================================================================
# PREDICATES
# =============================================================================

@dataclass(frozen=True)
class Equals:
    """column = value"""

    column: str
    value: Any

    def __post_init__(self):
        _check_column(self.column)

    def compile(self, params: _Params, dialect: str, table: str) -> str:
        return f"{self.column} = {params.add(self.value)}"


@dataclass(frozen=True)
class Contains:
    """Case-insensitive substring match on a text column."""

    column: str
    text: str

    def __post_init__(self):
        _check_column(self.column)

    def compile(self, params: _Params, dialect: str, table: str) -> str:
        pattern = f"%{escape_like(self.text.lower())}%"
        return f"{_lower(dialect)}({self.column}) LIKE {params.add(pattern)} ESCAPE '{LIKE_ESCAPE}'"


@dataclass(frozen=True)
class TagContains:
    """True when any tag contains the text, case-insensitively."""

    text: str

    def compile(self, params: _Params, dialect: str, table: str) -> str:
        pattern = f"%{escape_like(self.text.lower())}%"
        placeholder = params.add(pattern)
        if dialect == "sqlite":
            return (
                f"EXISTS (SELECT 1 FROM json_each({table}.tags) "
                f"WHERE {SQLITE_LOWER}(json_each.value) LIKE {placeholder} ESCAPE '{LIKE_ESCAPE}')"
            )
        return (
            f"EXISTS (SELECT 1 FROM unnest(tags) AS tag "
            f"WHERE LOWER(tag) LIKE {placeholder} ESCAPE '{LIKE_ESCAPE}')"
        )


@dataclass(frozen=True)
class AnyOf:
    """Logical OR of other predicates."""

    predicates: Tuple[Any, ...]

    def compile(self, params: _Params, dialect: str, table: str) -> str:
        parts = [p.compile(params, dialect, table) for p in self.predicates]
        return "(" + " OR ".join(parts) + ")"


Predicate = Union[Equals, Contains, TagContains, AnyOf]


# =============================================================================
# STATEMENTS
# =============================================================================

@dataclass
class SelectQuery:
    """SELECT over the tasks table with ANDed predicates, ordering and limit."""

    table: str = TABLE
    predicates: List[Predicate] = field(default_factory=list)
    sort: SortKey = SortKey.CREATED_AT
    max_rows: Optional[int] = None

    def where(self, predicate: Predicate) -> "SelectQuery":
        self.predicates.append(predicate)
        return self

    def order_by(self, sort: Union[str, SortKey]) -> "SelectQuery":
        self.sort = SortKey.parse(sort)
        return self

    def limit(self, max_rows: Optional[int]) -> "SelectQuery":
        if max_rows is not None and max_rows < 1:
            raise ValidationError("limit must be a positive integer")
        self.max_rows = max_rows
        return self

    def compile(self, dialect: str) -> Tuple[str, List[Any]]:
        params = _Params()
        sql = f"SELECT {', '.join(COLUMNS)} FROM {self.table}"

        if self.predicates:
            conditions = [p.compile(params, dialect, self.table) for p in self.predicates]
            sql += " WHERE " + " AND ".join(conditions)

        sql += f" ORDER BY {ORDERINGS[self.sort]}"

        if self.max_rows is not None:
            sql += f" LIMIT {params.add(self.max_rows)}"

        logger.debug(f"Compiled select: {sql}")
        return sql, params.values


@dataclass
class UpdateStatement:
    """
    Partial UPDATE of one task.

    ``changes`` holds already-encoded values for UPDATABLE_COLUMNS only.
    updated_at is always refreshed and never moves backwards; completed_at
    is stamped only if the status becomes completed and it is still NULL.
    """

    task_id: str
    changes: Dict[str, Any]
    now: Any
    table: str = TABLE

    def compile(self, dialect: str) -> Tuple[str, List[Any]]:
        unknown = set(self.changes) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Columns not updatable: {', '.join(sorted(unknown))}")

        params = _Params()
        assignments = [
            f"{column} = {params.add(self.changes[column])}"
            for column in UPDATABLE_COLUMNS
            if column in self.changes
        ]

        if self.changes.get("status") == "completed":
            assignments.append(f"completed_at = COALESCE(completed_at, {params.add(self.now)})")

        greatest = "MAX" if dialect == "sqlite" else "GREATEST"
        assignments.append(f"updated_at = {greatest}(updated_at, {params.add(self.now)})")

        sql = (
            f"UPDATE {self.table} SET {', '.join(assignments)} "
            f"WHERE id = {params.add(self.task_id)}"
        )
        logger.debug(f"Compiled update: {sql}")
        return sql, params.values


def build_insert(table: str = TABLE) -> str:
    """INSERT of a full row; parameters come from codec.task_to_params."""
    placeholders = ", ".join(f"${i}" for i in range(1, len(COLUMNS) + 1))
    return f"INSERT INTO {table} ({', '.join(COLUMNS)}) VALUES ({placeholders})"


def build_get(task_id: str, dialect: str, table: str = TABLE) -> Tuple[str, List[Any]]:
    """SELECT one task by id."""
    return SelectQuery(table=table).where(Equals("id", task_id)).compile(dialect)


def build_delete(task_id: str, table: str = TABLE) -> Tuple[str, List[Any]]:
    return f"DELETE FROM {table} WHERE id = $1", [task_id]


def build_list_query(
    status: Optional[str] = ALL,
    priority: Optional[str] = ALL,
    category: Optional[str] = None,
    sort_by: Union[str, SortKey] = SortKey.PRIORITY,
    limit: Optional[int] = None,
    table: str = TABLE,
) -> SelectQuery:
    """
    Map list filters to a SelectQuery.

    ``all`` or None for status/priority, and None or "" for category,
    contribute no predicate.
    """
    query = SelectQuery(table=table)

    if status not in (None, ALL):
        query.where(Equals("status", validate_status(status)))

    if priority not in (None, ALL):
        query.where(Equals("priority", validate_priority(priority)))

    if category:
        query.where(Equals("category", category))

    return query.order_by(sort_by).limit(limit)


def build_search_query(
    text: str,
    search_in: Union[str, SearchField] = SearchField.BOTH,
    limit: Optional[int] = None,
    table: str = TABLE,
) -> SelectQuery:
    """
    Map a text search to a SelectQuery ordered by created_at DESC.

    ``both`` means title OR description; ``tags`` matches any tag.
    """
    if not text or not text.strip():
        raise ValidationError("Search query cannot be empty")

    search_field = SearchField.parse(search_in)

    if search_field is SearchField.TITLE:
        predicate = Contains("title", text)
    elif search_field is SearchField.DESCRIPTION:
        predicate = Contains("description", text)
    elif search_field is SearchField.TAGS:
        predicate = TagContains(text)
    else:
        predicate = AnyOf((Contains("title", text), Contains("description", text)))

    return SelectQuery(table=table).where(predicate).order_by(SortKey.CREATED_AT).limit(limit)
