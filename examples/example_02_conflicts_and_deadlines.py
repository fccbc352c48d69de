"""Example 02: Conflict Detection and Request Deadlines.

This example demonstrates:
- Passing the hash a client last read as previous_hash
- Advisory conflict reporting through an event sink (the write still lands)
- Per-request deadlines and RequestTimeoutError
"""

import logging
from pathlib import Path

from docstore import (
    AccessFacade,
    Document,
    DocumentStore,
    RecordingEventSink,
    RequestTimeoutError,
    create_tables,
    load_config,
)

CONFIG_PATH = Path(__file__).with_name("docstore.example.yml")
KEY = "0f3c1b2a-7d2e-4a0b-9f1e-2c3d4e5f6a7b"


def main():
    """Run the conflict and deadline example."""
    logging.basicConfig(
        level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    print("=" * 80)
    print("EXAMPLE 02: CONFLICT DETECTION AND DEADLINES")
    print("=" * 80)

    Path("tmp").mkdir(exist_ok=True)
    loaded = load_config(str(CONFIG_PATH))
    events = RecordingEventSink()
    store = DocumentStore.from_config(loaded.config, loaded.registry, events=events)
    create_tables(store.engine, store.registry)

    with AccessFacade(store, loaded.registry, loaded.config) as facade:
        # Section 1: Two editors start from the same version
        first = facade.write("draft_content", KEY, Document(b'{"title":"v1"}'))
        print(f"\n✓ Initial draft: {first.hash}")

        second = facade.write(
            "draft_content", KEY, Document(b'{"title":"v2"}'), previous_hash=first.hash
        )
        print(f"✓ Editor A saved from the current hash: {second.outcome.value}")

        # Section 2: Editor B still holds the first hash, so a conflict is reported
        third = facade.write(
            "draft_content",
            KEY,
            Document(b'{"title":"v3"}'),
            previous_hash=first.hash,
            transaction_id="tid_editor_b",
        )
        print(f"✓ Editor B saved from a stale hash: {third.outcome.value}")
        for event in events.events:
            print(f"  conflict: {event.message} (tid={event.transaction_id})")

        # Section 3: A deadline that is too short abandons the request
        try:
            facade.read("draft_content", KEY, timeout_s=0.000001)
        except RequestTimeoutError as e:
            print(f"\n✓ Deadline exceeded: {e}")

    store.close()


if __name__ == "__main__":
    main()
