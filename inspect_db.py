import argparse
import json

from backend.cfo_helper import create_app
from backend.cfo_helper.models.kv_entry import KVEntry
from backend.cfo_helper.services.kv_store import KVStore
from backend.cfo_helper.services.scenarios import newest_first


def inspect_database(prefix, row_limit):
    app = create_app()
    with app.app_context():
        print(f"Total entries: {KVEntry.query.count()}")

        usage = KVStore().get(app.config['USAGE_KEY'])
        print(f"Usage record: {json.dumps(usage)}")

        if prefix is not None:
            inspect_prefix(prefix, row_limit)


def inspect_prefix(prefix, limit=5):
    records = newest_first(KVStore().get_by_prefix(prefix), limit)
    print(f"\nPrefix: {prefix!r} ({len(records)} shown, newest first)")
    for record in records:
        print(f"  {json.dumps(record)}")

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Inspect the CFO Helper key-value store")
    parser.add_argument("--prefix", type=str, default=None, help="Key prefix to list, e.g. scenario- or report-")
    parser.add_argument("--row_limit", type=int, default=10, help="Maximum number of records to print")
    args = parser.parse_args()
    inspect_database(args.prefix, args.row_limit)
