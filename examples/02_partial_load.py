"""
Example 02: Partial Load

This example demonstrates loading a record into a narrower class and
inspecting the fields that did not fit.
"""

from record_map import RecordMapper, RecordMismatchError, int8
from dataclasses import dataclass


@dataclass
class Sensor:
    """Only some of the stored fields"""
    name: str = ""
    level: int8 = 0


RECORD = {
    "properties": {
        "name": {"stringValue": "boiler"},
        "level": {"integerValue": "1000"},
        "firmware": {"stringValue": "2.1"},
    }
}


def main():
    print("=== Partial Load ===\n")

    # Strict mapping raises, but keeps what it could load
    print("1. Strict:")
    try:
        RecordMapper(Sensor).map_one(RECORD)
    except RecordMismatchError as e:
        print(f"   Error: {e}")
        print(f"   Partial: {e.partial}\n")

    # Lenient mapping returns the partial object
    print("2. Lenient:")
    sensor = RecordMapper(Sensor, strict=False).map_one(RECORD)
    print(f"   Data: {sensor}")


if __name__ == "__main__":
    main()
