"""
Example 02: Query Builder

This example builds parameterized SELECT statements for a Pydantic model
and shows how the same query renders for both placeholder dialects.
"""

from typing import Annotated, Optional

from pydantic import BaseModel

from row_map import ConnectionConfig, Dialect, Mapping, db


class User(BaseModel):
    """User model using Pydantic"""
    id: Annotated[int, db("id,pk")]
    name: Annotated[str, db("name")]
    age: Annotated[Optional[int], db("age")] = None


def main():
    config = ConnectionConfig(driver="sqlite", database=":memory:", pool_size=1)
    mapping = Mapping.from_config(config)
    mapping.executor.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, age INTEGER)")
    mapping.add_table("users", User)

    for i, (name, age) in enumerate([("Alice", 34), ("Bob", 27), ("Carol", 41), ("Dan", None)], 1):
        mapping.insert(User(id=i, name=name, age=age))

    print("=== Query Builder ===\n")

    query = mapping.query(User).where("age >", 30).order("age DESC").limit(5)
    print(f"1. SQL:    {query}")
    print(f"   Params: {query.params}")
    for user in query.all():
        print(f"   - {user.name} ({user.age})")
    print()

    query = mapping.query(User, ["id", "name"]).in_("name", "Bob", "Dan")
    print(f"2. SQL:    {query}")
    for user in query.all():
        print(f"   - {user.id}: {user.name}")
    print()

    # The same query for a $n dialect
    numbered = Mapping(dialect=Dialect.NUMBERED)
    numbered.add_table("users", User)
    query = numbered.query(User).where("name", "Alice").in_("age", 30, 34)
    print(f"3. Numbered SQL: {query}")

    mapping.executor.close()


if __name__ == "__main__":
    main()
