"""
mirror.py: Local snapshot of actors and shows for the printable sheet.

Every successful online load replaces the whole snapshot (clear, then bulk
insert, in one transaction). When the server is unreachable the last
snapshot is read instead. Attendance is never cached: the offline sheet is
read-only, marks go on paper and are entered later through `reconcile`.
"""

from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, create_engine, select

from .client import CallboardClient, OfflineError

logger = logging.getLogger(__name__)

metadata = MetaData()

actors_table = Table(
    "offline_actor",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("first_name", String(80), default=""),
    Column("last_name", String(80), default="", index=True),
    Column("synced_at", DateTime, nullable=False),
)

shows_table = Table(
    "offline_show",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("date", String(10), nullable=False, index=True),  # YYYY-MM-DD
    Column("show_time", String(5), nullable=False),
    Column("synced_at", DateTime, nullable=False),
)

MIN_DATE = "1970-01-01"
MAX_DATE = "2099-12-31"


@dataclass
class Snapshot:
    actors: List[Dict[str, Any]]
    shows: List[Dict[str, Any]]
    attendance: List[Dict[str, Any]] = field(default_factory=list)
    source: str = "network"  # network|cache
    synced_at: Optional[datetime] = None

    @property
    def offline(self) -> bool:
        return self.source == "cache"


class OfflineMirror:
    def __init__(self, client: CallboardClient, cache_url: str = "sqlite:///callboard-offline.db", engine=None):
        self.client = client
        self.engine = engine or create_engine(cache_url)
        metadata.create_all(self.engine)

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def replace_snapshot(self, actors: Iterable[Dict[str, Any]], shows: Iterable[Dict[str, Any]],
                         synced_at: Optional[datetime] = None) -> datetime:
        synced_at = synced_at or datetime.utcnow()
        actor_rows = [
            {
                "id": a["id"],
                "first_name": a.get("firstName") or "",
                "last_name": a.get("lastName") or "",
                "synced_at": synced_at,
            }
            for a in actors
        ]
        show_rows = [
            {
                "id": s["id"],
                "date": str(s["date"])[:10],
                "show_time": s["showTime"],
                "synced_at": synced_at,
            }
            for s in shows
        ]
        with self.engine.begin() as conn:
            conn.execute(actors_table.delete())
            conn.execute(shows_table.delete())
            if actor_rows:
                conn.execute(actors_table.insert(), actor_rows)
            if show_rows:
                conn.execute(shows_table.insert(), show_rows)
        return synced_at

    def cached(self, start: Optional[date] = None, end: Optional[date] = None) -> Snapshot:
        lo = start.isoformat() if start else MIN_DATE
        hi = end.isoformat() if end else MAX_DATE
        with self.engine.connect() as conn:
            actor_rows = conn.execute(
                select(actors_table).order_by(actors_table.c.last_name, actors_table.c.first_name)
            ).mappings().all()
            show_rows = conn.execute(
                select(shows_table)
                .where(shows_table.c.date >= lo, shows_table.c.date <= hi)
                .order_by(shows_table.c.date, shows_table.c.show_time)
            ).mappings().all()

        stamps = [r["synced_at"] for r in list(actor_rows) + list(show_rows)]
        return Snapshot(
            actors=[{"id": r["id"], "firstName": r["first_name"], "lastName": r["last_name"]} for r in actor_rows],
            shows=[{"id": r["id"], "date": r["date"], "showTime": r["show_time"]} for r in show_rows],
            attendance=[],
            source="cache",
            synced_at=max(stamps) if stamps else None,
        )

    # -------------------------------------------------------------------------
    # Load / reconcile
    # -------------------------------------------------------------------------

    def load(self, start: Optional[date] = None, end: Optional[date] = None) -> Snapshot:
        try:
            actors = self.client.list_actors()
            shows = self.client.list_shows(start, end)
        except OfflineError as exc:
            logger.warning("Server unreachable, reading offline snapshot: %s", exc)
            return self.cached(start, end)

        synced_at = self.replace_snapshot(actors, shows)

        attendance: List[Dict[str, Any]] = []
        try:
            for show in shows:
                for a in self.client.list_attendance(show["id"]):
                    attendance.append({"userId": a["userId"], "showId": a["showId"], "status": a["status"]})
        except OfflineError as exc:
            logger.warning("Lost connection while loading attendance: %s", exc)
            attendance = []

        return Snapshot(
            actors=[{"id": a["id"], "firstName": a.get("firstName") or "", "lastName": a.get("lastName") or ""}
                    for a in actors],
            shows=[{"id": s["id"], "date": str(s["date"])[:10], "showTime": s["showTime"]} for s in shows],
            attendance=attendance,
            source="network",
            synced_at=synced_at,
        )

    def reconcile(self, show_id: int, user_ids: Iterable[int]) -> int:
        """Enter a paper sheet once the connection is back."""
        count = self.client.bulk_mark(show_id, user_ids)
        logger.info("Reconciled %d paper sign-in(s) for show %s", count, show_id)
        return count


# -----------------------------------------------------------------------------
# Printable sheet
# -----------------------------------------------------------------------------

def build_print_sheet(snapshot: Snapshot) -> Dict[str, Any]:
    statuses = {(a["userId"], a["showId"]): a["status"] for a in snapshot.attendance}
    columns = [{"showId": s["id"], "date": s["date"], "showTime": s["showTime"]} for s in snapshot.shows]
    rows = []
    for actor in snapshot.actors:
        rows.append({
            "actorId": actor["id"],
            "name": f"{actor['lastName']}, {actor['firstName']}".strip(", "),
            "cells": [statuses.get((actor["id"], c["showId"]), "") for c in columns],
        })
    return {
        "offline": snapshot.offline,
        "syncedAt": snapshot.synced_at.isoformat() if snapshot.synced_at else None,
        "columns": columns,
        "rows": rows,
    }


def print_sheet_csv(sheet: Dict[str, Any]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["Actor"] + [f"{c['date']} {c['showTime']}" for c in sheet["columns"]])
    for row in sheet["rows"]:
        writer.writerow([row["name"]] + row["cells"])
    return buf.getvalue()
