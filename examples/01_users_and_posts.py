"""
Example 01: Users and Posts

Declares two related entities, saves them through repositories and shows the
relation checks that guard saves and deletes.
"""

from dataclasses import dataclass
from typing import Optional

from row_orm import (
    ConnectionConfig,
    DanglingReferenceError,
    DependentRowsExistError,
    Engine,
    ManyToOne,
    OneToMany,
    Repository,
    column,
    entity,
    relationship,
)


@entity(table="Users")
@dataclass
class User:
    """User entity"""
    id: int = column(primary_key=True)
    username: str = ""
    posts: Optional[list] = relationship(OneToMany(target_entity="Post", mapped_by="user_id"))


@entity(table="Posts")
@dataclass
class Post:
    """Post entity; userId references Users.id"""
    id: int = column(primary_key=True)
    user_id: Optional[str] = column(
        "userId", relation=ManyToOne(target_entity="User"), default=None
    )
    content: str = ""


def main():
    engine = Engine.from_config(ConnectionConfig(driver="sqlite", database=":memory:"))
    engine.execute('CREATE TABLE "Users" (id INTEGER PRIMARY KEY, username TEXT)')
    engine.execute('CREATE TABLE "Posts" (id INTEGER PRIMARY KEY, "userId" TEXT, content TEXT)')

    users = Repository(User, engine)
    posts = Repository(Post, engine)

    print("=== Users and Posts ===\n")

    print("1. Save a user and a post:")
    users.save(User(id=1, username="JohnDoe"))
    posts.save(Post(id=1, user_id="1", content="Hello"))
    print(f"   {users.find_by_id(1)}")
    print(f"   {posts.find_by_id(1)}\n")

    print("2. Save a post for a missing user:")
    try:
        posts.save(Post(id=3, user_id="3", content="Orphan"))
    except DanglingReferenceError as e:
        print(f"   Rejected: {e}")
    print(f"   Post ids: {[p.id for p in posts.find_all()]}\n")

    print("3. Upsert the user:")
    users.save(User(id=1, username="JaneDoe"))
    print(f"   {users.find_by_id(1)}\n")

    print("4. Delete a user that still has posts:")
    try:
        users.delete(1)
    except DependentRowsExistError as e:
        print(f"   Blocked: {e}\n")

    print("5. Delete the post, then the user:")
    posts.delete(1)
    users.delete(1)
    print(f"   User 1 exists: {users.exists(1)}\n")

    engine.close()


if __name__ == "__main__":
    main()
