"""Example 01: Basic Usage - docstore Fundamentals.

This example demonstrates the fundamental operations:
- Loading table schemas and settings from a YAML config file
- Creating the configured tables
- Writing documents with metadata through the access facade
- Reading a document back with its hash and metadata
- Handling a read of a key that was never written
"""

from pathlib import Path

from docstore import (
    AccessFacade,
    Document,
    DocumentNotFoundError,
    DocumentStore,
    create_tables,
    load_config,
    new_transaction_id,
)

CONFIG_PATH = Path(__file__).with_name("docstore.example.yml")


def main():
    """Run the basic usage example."""
    print("=" * 80)
    print("DOCSTORE BASIC USAGE EXAMPLE")
    print("=" * 80)

    # Step 1: Load configuration
    # The config file names the database and maps each table's columns.
    Path("tmp").mkdir(exist_ok=True)
    loaded = load_config(str(CONFIG_PATH))
    tables = ", ".join(loaded.registry.tables())
    print(f"\n✓ Loaded {len(loaded.registry)} table schemas: {tables}")

    # Step 2: Open the store and create missing tables
    store = DocumentStore.from_config(loaded.config, loaded.registry)
    create_tables(store.engine, store.registry)
    print(f"✓ Tables ready in {loaded.config.database_url}")

    with AccessFacade(store, loaded.registry, loaded.config) as facade:
        # Step 3: Write a document
        # Metadata keys are case-insensitive; unmapped keys are not stored.
        tid = new_transaction_id()
        doc = Document(
            b'{"annotations":[{"predicate":"about","id":"http://api.example.com/things/1"}]}',
            {"X-Request-Id": tid, "_timestamp": "2024-01-01T00:00:00.000Z"},
        )
        key = "9a5e3b4a-55da-498c-816f-9c534e1392bd"
        result = facade.write("published_annotations", key, doc, transaction_id=tid)
        print(f"\n✓ Write {result.outcome.value}: hash={result.hash}")

        # Step 4: Write again: same key, so this is an update
        result = facade.write("published_annotations", key, doc, transaction_id=tid)
        print(f"✓ Write {result.outcome.value}: hash={result.hash}")

        # Step 5: Read it back
        stored = facade.read("published_annotations", key)
        print(f"\n✓ Read body: {stored.body.decode()}")
        print(f"  hash: {stored.hash}")
        for meta_key, value in stored.metadata.items():
            print(f"  {meta_key}: {value}")

        # Step 6: Missing keys raise DocumentNotFoundError
        try:
            facade.read("published_annotations", "no-such-key")
        except DocumentNotFoundError as e:
            print(f"\n✓ Missing key: {e}")

    store.close()


if __name__ == "__main__":
    main()
