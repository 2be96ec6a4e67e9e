# -*- coding: utf-8 -*-
"""
Full reset of the SQLite database plus a demo theatre, with verbose logs.

Run from the project root:
  python scripts/seed_demo.py
"""

from __future__ import annotations
import sys, traceback
from datetime import date, timedelta
from pathlib import Path
from typing import Optional
from sqlalchemy import text

# --- project path ---
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

print(f"[seed] ROOT={ROOT}")
if not (ROOT / "callboard" / "__init__.py").exists():
    raise SystemExit("[seed] error: callboard/__init__.py not found next to scripts/")

print("[seed] importing app…")
from callboard import create_app  # type: ignore
from callboard.extensions import db  # type: ignore
from callboard.models import Organization, User  # type: ignore
from callboard.modules.shows.importer import bulk_generate  # type: ignore

DEMO_PASSWORD = "password123"
ACTORS = [("Alice", "Anderson"), ("Bob", "Brown"), ("Carol", "Clark")]
# Sunday matinee, Wed-Fri evenings, Saturday two-show day
WEEKDAY_TIMES = {"0": ["14:00"], "3": ["19:00"], "4": ["19:00"], "5": ["19:00"], "6": ["14:00", "19:00"]}


def _db_path_from_uri(uri: str) -> Optional[Path]:
    if uri.startswith("sqlite:///"):
        return Path(uri.replace("sqlite:///", "")).resolve()
    return None


def _cnt(table: str) -> int:
    return int(db.session.execute(text(f'SELECT COUNT(*) FROM "{table}"')).scalar() or 0)


def main() -> int:
    print("[seed] create_app()…")
    app = create_app()
    with app.app_context():
        uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
        print(f"[seed] SQLALCHEMY_DATABASE_URI = {uri}")

        db_path = _db_path_from_uri(uri)
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            if db_path.exists():
                print(f"[seed] removing database file: {db_path}")
                db_path.unlink()
        else:
            print("[seed] not sqlite, dropping tables instead")
            db.drop_all()

        print("[seed] creating tables from models…")
        db.create_all()

        # --- organization ---
        org = Organization(name="Demo Theatre Company", slug="demo-theatre",
                           display_title="Demo Theatre", week_starts_on=0)
        db.session.add(org)
        db.session.commit()
        print(f"[seed] organization id={org.id}")

        # --- users ---
        admin = User(email="admin@demo.theatre", first_name="Admin", last_name="User",
                     role="admin", organization_id=org.id)
        admin.set_password(DEMO_PASSWORD)
        db.session.add(admin)
        for first, last in ACTORS:
            u = User(email=f"{first.lower()}.{last.lower()}@demo.theatre", first_name=first,
                     last_name=last, role="actor", organization_id=org.id)
            u.set_password(DEMO_PASSWORD)
            db.session.add(u)
        db.session.commit()
        print(f"[seed] user rows={_cnt('user')}")

        # --- three weeks of shows from the start of the current week ---
        today = date.today()
        week_start = today - timedelta(days=(today.weekday() + 1) % 7)
        result = bulk_generate(org.id, week_start.isoformat(),
                               (week_start + timedelta(days=20)).isoformat(), WEEKDAY_TIMES)
        print(f"[seed] shows created={len(result.created)} (show rows={_cnt('show')})")

        print("\n[seed] Done.")
        print(f"Admin:  admin@demo.theatre / {DEMO_PASSWORD}")
        print("Actors: " + ", ".join(f"{f.lower()}.{l.lower()}@demo.theatre" for f, l in ACTORS))
        if db_path:
            print(f"\nDatabase file: {db_path}")
        return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except Exception:
        print("\n[seed] ERROR:")
        traceback.print_exc()
        sys.exit(1)
