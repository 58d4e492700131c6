"""
Example 01: Basic Mapping

This example registers a dataclass against a table, then inserts, updates
and selects records without writing any marshaling code.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from row_map import ConnectionConfig, Mapping, column


@dataclass
class Metadata:
    """Stored as JSON in a single column"""
    tags: list[str] = field(default_factory=list)
    word_count: int = 0


@dataclass
class Post:
    """Blog post mapped to the posts table"""
    id: int = column("id", pk=True)
    title: str = column("title")
    meta: Metadata = column("meta,serialize")


def main():
    db_file = tempfile.NamedTemporaryFile(delete=False, suffix=".db")
    db_path = db_file.name
    db_file.close()

    config = ConnectionConfig(driver="sqlite", database=db_path, pool_size=1)
    mapping = Mapping.from_config(config)
    mapping.executor.execute(
        "CREATE TABLE posts (id INTEGER PRIMARY KEY, title TEXT DEFAULT 'untitled', meta TEXT)"
    )
    mapping.add_table("posts", Post)

    print("=== Basic Mapping ===\n")

    # Insert: unset fields are left out of the statement
    print("1. Insert:")
    mapping.insert(Post(id=1, title="Hello", meta=Metadata(tags=["intro"], word_count=120)))
    mapping.insert(Post(id=2))
    for post in mapping.select(Post, "SELECT * FROM posts ORDER BY id"):
        print(f"   {post}")
    print()

    # Update: the record is changed in place and the row is matched by primary key
    print("2. Update:")
    post = mapping.select_one(Post, "SELECT * FROM posts WHERE id = ?", 2)
    mapping.update(post, {"title": "Second post"})
    print(f"   Local:  {post}")
    print(f"   Stored: {mapping.select_one(Post, 'SELECT * FROM posts WHERE id = ?', 2)}\n")

    # SelectOne returns None when nothing matches
    print("3. Missing row:")
    print(f"   {mapping.select_one(Post, 'SELECT * FROM posts WHERE id = ?', 99)}\n")

    mapping.executor.close()
    Path(db_path).unlink()


if __name__ == "__main__":
    main()
