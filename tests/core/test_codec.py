"""
Tests for the record codec.
"""

import json
import pytest
from datetime import date, datetime, timedelta, timezone


class TestTimestamps:
    """Tests for timestamp parsing and formatting."""

    def test_parse_iso_with_z(self):
        from fftasks.codec import parse_timestamp

        parsed = parse_timestamp("2025-01-02T03:04:05Z")

        assert parsed == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_parse_converts_offsets_to_utc(self):
        from fftasks.codec import parse_timestamp

        parsed = parse_timestamp("2025-01-02T05:04:05+02:00")

        assert parsed == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert parsed.utcoffset() == timedelta(0)

    def test_parse_naive_is_utc(self):
        from fftasks.codec import parse_timestamp

        parsed = parse_timestamp(datetime(2025, 1, 2, 3, 4, 5))

        assert parsed.tzinfo == timezone.utc

    def test_parse_date(self):
        from fftasks.codec import parse_timestamp

        assert parse_timestamp(date(2025, 6, 1)) == datetime(2025, 6, 1, tzinfo=timezone.utc)
        assert parse_timestamp("2025-06-01") == datetime(2025, 6, 1, tzinfo=timezone.utc)

    def test_parse_none(self):
        from fftasks.codec import parse_timestamp

        assert parse_timestamp(None) is None

    @pytest.mark.parametrize("value", ["tomorrow", "2025-13-01", 12345])
    def test_parse_invalid(self, value):
        from fftasks.codec import parse_timestamp
        from fftasks.errors import ValidationError

        with pytest.raises(ValidationError):
            parse_timestamp(value)

    def test_format_is_stable(self):
        """Test that every input form renders identically."""
        from fftasks.codec import format_timestamp

        expected = "2025-01-02T03:04:05.000000+00:00"

        assert format_timestamp("2025-01-02T03:04:05Z") == expected
        assert format_timestamp(datetime(2025, 1, 2, 3, 4, 5)) == expected
        assert format_timestamp(expected) == expected
        assert format_timestamp(None) is None

    def test_encode_timestamp_per_dialect(self):
        from fftasks.codec import encode_timestamp

        value = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        assert encode_timestamp(value, "sqlite") == "2025-01-02T03:04:05.000000+00:00"
        assert encode_timestamp(value, "postgres") == value
        assert encode_timestamp(None, "sqlite") is None


class TestTags:
    """Tests for tag encoding."""

    def test_encode_tags(self):
        from fftasks.codec import encode_tags

        assert encode_tags(["b", "a"], "sqlite") == '["b", "a"]'
        assert encode_tags(["b", "a"], "postgres") == ["b", "a"]
        assert encode_tags(None, "sqlite") is None

    def test_decode_tags(self):
        from fftasks.codec import decode_tags

        assert decode_tags('["x", "y"]') == ["x", "y"]
        assert decode_tags(["x", "y"]) == ["x", "y"]
        assert decode_tags(None) is None


class TestRows:
    """Tests for row conversion."""

    def test_row_to_task_sqlite(self):
        """Test a SQLite-shaped row (text timestamps, JSON tags)."""
        from fftasks.codec import row_to_task

        row = {
            "id": "task_1",
            "title": "Test",
            "description": "body",
            "status": "completed",
            "priority": "low",
            "category": "",
            "tags": json.dumps(["a", "b"]),
            "created_at": "2025-01-01T00:00:00.000000+00:00",
            "updated_at": "2025-01-02T00:00:00.000000+00:00",
            "due_date": None,
            "completed_at": "2025-01-02T00:00:00.000000+00:00",
        }

        task = row_to_task(row)

        assert task.id == "task_1"
        assert task.category is None
        assert task.tags == ["a", "b"]
        assert task.created_at == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert task.completed_at == datetime(2025, 1, 2, tzinfo=timezone.utc)
        assert task.due_date is None

    def test_row_to_task_postgres(self):
        """Test a PostgreSQL-shaped row (datetime objects, native arrays)."""
        from fftasks.codec import row_to_task

        created = datetime(2025, 1, 1, 1, 0, tzinfo=timezone(timedelta(hours=1)))
        row = {
            "id": "task_2",
            "title": "Test",
            "description": None,
            "status": "pending",
            "priority": "urgent",
            "category": "bug",
            "tags": None,
            "created_at": created,
            "updated_at": created,
            "due_date": None,
            "completed_at": None,
        }

        task = row_to_task(row)

        assert task.description == ""
        assert task.category == "bug"
        assert task.tags is None
        assert task.created_at == datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)
        assert task.to_dict()["createdAt"] == "2025-01-01T00:00:00.000000+00:00"

    def test_task_to_params_matches_columns(self):
        """Test that insert parameters line up with the column list."""
        from fftasks.codec import task_to_params
        from fftasks.db.query import COLUMNS
        from fftasks.models.task import Task

        task = Task(id="task_3", title="T", tags=["x"], category="c")

        params = dict(zip(COLUMNS, task_to_params(task, "sqlite")))

        assert len(task_to_params(task, "sqlite")) == len(COLUMNS)
        assert params["id"] == "task_3"
        assert params["status"] == "pending"
        assert params["tags"] == '["x"]'
        assert params["category"] == "c"
        assert params["created_at"] == params["updated_at"]
        assert params["completed_at"] is None
