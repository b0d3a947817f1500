"""Backup / restore a storage profile.

Note: the backup is a plain JSON object of raw stored values, one entry per
key. Restoring writes keys directly to storage and publishes no change
events; running contexts notice the restored keys through their
`StorageWatcher`.
"""

from __future__ import annotations

import argparse
import importlib
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Dict, List

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.attendance_sync.attendance_sync.container import build_storage
from src.attendance_sync.attendance_sync.storage.backend import KeyValueStorage
from src.attendance_sync.attendance_sync.sync.storage_watch import StorageWatcher


def export_storage(storage: KeyValueStorage) -> Dict[str, str]:
    return {key: storage.get_item(key) for key in sorted(storage.keys())}


def import_storage(storage: KeyValueStorage, snapshot: Dict[str, str]) -> int:
    for key, value in snapshot.items():
        storage.set_item(key, value)
    return len(snapshot)


def restore_storage(storage: KeyValueStorage, snapshot: Dict[str, str]) -> List[str]:
    """Write ``snapshot`` back and return the keys whose value actually changed."""

    watcher = StorageWatcher(storage, lambda key, _value: print(f"  changed: {key}"))
    watcher.prime()
    import_storage(storage, snapshot)
    return watcher.poll()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--restore", metavar="FILE", help="write a backup file back into storage")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    storage = build_storage(settings)

    if args.restore:
        snapshot = json.loads(Path(args.restore).read_text(encoding="utf-8"))
        changed = restore_storage(storage, snapshot)
        print(f"OK: Restored {len(snapshot)} keys from {args.restore} ({len(changed)} changed)")
        return

    out_dir = REPO_ROOT / "backups"
    out_dir.mkdir(parents=True, exist_ok=True)

    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    out_file = out_dir / f"storage_{ts}.json"
    snapshot = export_storage(storage)
    out_file.write_text(json.dumps(snapshot, indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"OK: Backup created: {out_file} ({len(snapshot)} keys)")


if __name__ == "__main__":
    main()
