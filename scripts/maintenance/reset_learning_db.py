"""
Reset the review store.

DANGEROUS: This deletes all learning items, reviews and snapshots!
Only use when you want to start fresh for testing.

Usage:
    python -m scripts.maintenance.reset_learning_db
"""

from recall.fsrs import database
from recall.logging import configure_logging


def main():
    configure_logging(json=False)

    print("=" * 60)
    print("WARNING: Reset Review Store")
    print("=" * 60)
    print()
    print("This will DELETE:")
    print("  - All learning items")
    print("  - All review records (the full review history)")
    print("  - All cached memory snapshots")
    print()

    response = input("Are you sure you want to reset? (type 'yes' to confirm): ")

    if response.lower() == "yes":
        print("\nResetting database...")
        database.reset_db()
        print("Database reset complete.")
    else:
        print("\nCancelled. No changes made.")


if __name__ == "__main__":
    main()
