from __future__ import annotations

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from src.attendance_sync.attendance_sync.main import create_context


def main() -> None:
    context = create_context()
    try:
        seeded = context.store.initialize()
        storage = type(context.storage).__name__
        if seeded:
            print(f"OK: Seeded demo data -> {storage} ({len(context.store.users.get_all())} users)")
        else:
            print(f"OK: {storage} already initialized, nothing to do")
    finally:
        context.close()


if __name__ == "__main__":
    main()
