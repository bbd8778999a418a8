"""
List the branch names known to the configured data backend, optionally
filtered by a case-insensitive substring, and report whether server-side
pagination is available.

Usage:
    python scripts/check_branches.py [substring ...]
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bizdash.sources import get_transaction_source


def matching_branches(branches, patterns):
    if not patterns:
        return list(branches)
    lowered = [p.lower() for p in patterns]
    return [b for b in branches if any(p in b.lower() for p in lowered)]


def main(argv=None):
    patterns = sys.argv[1:] if argv is None else argv
    source = get_transaction_source()

    print(f"Checking branch names ({source.name} backend)...\n")
    branches = matching_branches(source.list_branches(), patterns)
    if not branches:
        print("No matching branches found.")
    else:
        print("Found branches:")
        for i, name in enumerate(branches, 1):
            print(f'{i}. "{name}"')

    metrics = source.performance_metrics()
    print(f"\nRecords: {metrics['totalRecords']}")
    print(f"Server-side pagination: {'available' if metrics['optimizedAvailable'] else 'NOT available'}")
    print(metrics['recommendedAction'])
    return branches


if __name__ == "__main__":
    main()
