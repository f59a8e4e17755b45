"""
Example 03: Nested Records

This example demonstrates nested records, embedded fields, flattened
legacy property names and saving objects back to records.
"""

from record_map import RecordMapper, Key, prop, save_entity
from dataclasses import dataclass, field


@dataclass
class Audit:
    created_by: str = ""


@dataclass
class LineItem:
    sku: str = ""
    qty: int = 0


@dataclass
class Order:
    """Order with embedded audit fields and a list of line items"""
    audit: Audit = prop(embed=True, default_factory=Audit)
    customer: str = ""
    items: list[LineItem] = field(default_factory=list)


def main():
    print("=== Nested Records ===\n")
    mapper = RecordMapper(Order)

    # Nested records
    print("1. Nested:")
    record = {
        "properties": {
            "customer": {"stringValue": "acme"},
            "created_by": {"stringValue": "ann"},
            "items": {"arrayValue": {"values": [
                {"entityValue": {"properties": {"sku": {"stringValue": "A1"}, "qty": {"integerValue": "2"}}}},
                {"entityValue": {"properties": {"sku": {"stringValue": "B7"}, "qty": {"integerValue": "1"}}}},
            ]}},
        }
    }
    order = mapper.map_one(record)
    print(f"   {order}\n")

    # The same order stored with flattened names
    print("2. Flattened:")
    legacy = {
        "properties": {
            "customer": {"stringValue": "acme"},
            "audit.created_by": {"stringValue": "ann"},
            "items.sku": {"arrayValue": {"values": [{"stringValue": "A1"}, {"stringValue": "B7"}]}},
            "items.qty": {"arrayValue": {"values": [{"integerValue": "2"}, {"integerValue": "1"}]}},
        }
    }
    print(f"   Same order: {mapper.map_one(legacy) == order}\n")

    # Save back
    print("3. Save:")
    entity = save_entity(Key("Order", id=42), order)
    print(f"   {entity.model_dump_json(by_alias=True, exclude_unset=True)}")


if __name__ == "__main__":
    main()
