"""Integration test for SQLite full workflow.

Covers: registration, sparse inserts, updates, selects, serialized columns
and the query builder end-to-end against a real SQLite in-memory database.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Annotated

import pytest
from pydantic import BaseModel

from row_map.core.connection import ConnectionConfig
from row_map.core.exceptions import ExecutionError
from row_map.core.mapping import Mapping
from row_map.mapping.columns import column, db

# --- Test models ---


@dataclass
class Payload:
    tags: list[str] = field(default_factory=list)
    score: float = 0.0


@dataclass
class Post:
    id: int = column("id", pk=True)
    title: str = column("title")
    body: Payload = column("body,serialize")
    cached: str = ""  # unmapped


class Comment(BaseModel):
    id: Annotated[int, db("id,pk")]
    post_id: Annotated[int, db("post_id")]
    text: Annotated[str | None, db("text")] = None


# --- Fixtures ---


@pytest.fixture
def mapping(sqlite_config: ConnectionConfig) -> Iterator[Mapping]:
    m = Mapping.from_config(sqlite_config)
    m.executor.execute(
        "CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT DEFAULT 'untitled', "
        "body TEXT, created_at TEXT DEFAULT '2024-01-01')"
    )
    m.executor.execute(
        "CREATE TABLE comments (id INTEGER PRIMARY KEY, post_id INTEGER NOT NULL, text TEXT)"
    )
    m.add_table("posts", Post)
    m.add_table("comments", Comment)
    yield m
    m.executor.close()


class TestSqliteWorkflow:
    def test_round_trip(self, mapping: Mapping) -> None:
        post = Post(id=1, title="hi", body=Payload(tags=["a", "b"], score=1.5))
        assert mapping.insert(post) == 1

        loaded = mapping.select_one(Post, "SELECT * FROM posts WHERE id = ?", 1)
        assert loaded == post

    def test_sparse_insert_uses_column_defaults(self, mapping: Mapping) -> None:
        mapping.insert(Post(id=2))
        loaded = mapping.select_one(Post, "SELECT id, title, body FROM posts WHERE id = ?", 2)
        assert loaded.title == "untitled"
        assert loaded.body is None

    def test_update(self, mapping: Mapping) -> None:
        post = Post(id=3, title="draft")
        mapping.insert(post)
        assert mapping.update(post, {"title": "final", "body": Payload(score=2.0)}) == 1

        loaded = mapping.select_one(Post, "SELECT * FROM posts WHERE id = ?", 3)
        assert loaded.title == "final"
        assert loaded.body == Payload(score=2.0)
        assert post.title == "final"

    def test_update_primary_key_targets_new_key(self, mapping: Mapping) -> None:
        post = Post(id=4, title="x")
        mapping.insert(post)
        assert mapping.update(post, {"id": 40}) == 0
        assert mapping.select_one(Post, "SELECT * FROM posts WHERE id = ?", 4).id == 4

    def test_select_ordering(self, mapping: Mapping) -> None:
        for i in (3, 1, 2):
            mapping.insert(Post(id=i, title=f"t{i}"))
        posts = mapping.select(Post, "SELECT id, title FROM posts ORDER BY id DESC")
        assert [p.id for p in posts] == [3, 2, 1]
        first = mapping.select_one(Post, "SELECT id FROM posts ORDER BY id DESC")
        assert first.id == 3

    def test_select_one_no_rows(self, mapping: Mapping) -> None:
        assert mapping.select_one(Post, "SELECT * FROM posts WHERE id = ?", 99) is None

    def test_query_builder(self, mapping: Mapping) -> None:
        for i in range(1, 6):
            mapping.insert(Post(id=i, title="even" if i % 2 == 0 else "odd"))

        odd = mapping.query(Post, "id, title").where("title", "odd").order("id DESC").limit(2).all()
        assert [p.id for p in odd] == [5, 3]

        picked = mapping.query(Post).in_("id", [1, 4]).where("id >", 1).all()
        assert [p.id for p in picked] == [4]

        assert mapping.query(Post).in_("id").all() == []

    def test_pydantic_records(self, mapping: Mapping) -> None:
        mapping.insert(Post(id=1, title="p"))
        mapping.insert(Comment(id=10, post_id=1, text="nice"))
        mapping.insert(Comment(id=11, post_id=1))

        comments = mapping.query(Comment).where("post_id", 1).order("id").all()
        assert comments == [
            Comment(id=10, post_id=1, text="nice"),
            Comment(id=11, post_id=1, text=None),
        ]

    def test_insert_values(self, mapping: Mapping) -> None:
        mapping.insert_values("comments", ["id", "post_id", "text"], 20, 1, "raw")
        comment = mapping.select_one(Comment, "SELECT * FROM comments WHERE id = ?", 20)
        assert comment.text == "raw"

    def test_constraint_violation(self, mapping: Mapping) -> None:
        mapping.insert(Post(id=1, title="a"))
        with pytest.raises(ExecutionError, match="UNIQUE"):
            mapping.insert(Post(id=1, title="b"))
