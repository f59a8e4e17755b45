"""
Example 01: Basic Load

This example demonstrates loading JSON records into dataclasses and Pydantic models.
"""

from record_map import RecordMapper, Key, prop
from dataclasses import dataclass, field
from pydantic import BaseModel, Field


@dataclass
class User:
    """User model using dataclass"""
    key: Key | None = prop("__key__", default=None)
    name: str = ""
    email: str = ""
    roles: list[str] = field(default_factory=list)


class UserPydantic(BaseModel):
    """User model using Pydantic"""
    name: str = ""
    email: str = Field(default="", json_schema_extra={"record": "mail"})


RECORDS = [
    {
        "key": {"path": [{"kind": "User", "id": "1"}]},
        "properties": {
            "name": {"stringValue": "Alice"},
            "email": {"stringValue": "alice@example.com"},
            "roles": {"arrayValue": {"values": [{"stringValue": "admin"}, {"stringValue": "dev"}]}},
        },
    },
    {
        "key": {"path": [{"kind": "User", "id": "2"}]},
        "properties": {
            "name": {"stringValue": "Bob"},
            "email": {"stringValue": "bob@example.com"},
        },
    },
]


def main():
    print("=== Basic Load ===\n")

    # Map to dataclass
    print("1. Dataclass Mapping:")
    mapper = RecordMapper(User)
    for user in mapper.map_many(RECORDS):
        print(f"   {user.key}: {user.name} <{user.email}> roles={user.roles}")
    print()

    # Map to Pydantic model, with a renamed property
    print("2. Pydantic Model Mapping:")
    record = {"properties": {"name": {"stringValue": "Cy"}, "mail": {"stringValue": "cy@example.com"}}}
    user = RecordMapper(UserPydantic).map_one(record)
    print(f"   Type: {type(user).__name__}")
    print(f"   Data: {user}")


if __name__ == "__main__":
    main()
