"""Seed agendas from the English manifesto summary bundle (idempotent).

Usage examples:
  python scripts/seed_agendas.py --url sqlite:///reform.db
  DATABASE_URL=postgresql://... python scripts/seed_agendas.py --update --enable-auto-approve

Behavior:
  - Reads locales/<lang>/summary.json (falls back to manifesto.json).
  - Inserts one agenda per item keyed by sequence_id = item id; the row id is
    the same deterministic UUID the API derives for an unseeded item, so votes
    and suggestions made before seeding stay attached.
  - Existing rows are left alone unless --update is given.
  - Ensures the single system_settings row exists.
"""
from __future__ import annotations
import argparse
import os
import sys
from pathlib import Path
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

sys.path.append(str(Path(__file__).resolve().parents[1]))
from app.db import Base  # noqa: E402
from app.models.agenda import Agenda  # noqa: E402
from app.models.system_setting import SystemSettings  # noqa: E402
import app.models  # noqa: E402,F401
from app.services.agenda_ids import generate_deterministic_uuid, to_manifesto_format  # noqa: E402
from app.services.i18n import TranslationStore  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]


def parse_args():
    p = argparse.ArgumentParser()
    p.add_argument("--url", default=os.getenv("DATABASE_URL"), help="Database URL (env DATABASE_URL by default)")
    p.add_argument("--locales", default=str(ROOT / "locales"), help="Locales directory")
    p.add_argument("--lang", default="en", help="Bundle language to seed from")
    p.add_argument("--update", action="store_true", help="Overwrite fields of agendas that already exist")
    p.add_argument("--create-tables", action="store_true", help="Create missing tables first (local development)")
    p.add_argument("--enable-auto-approve", action="store_true", help="Turn on auto approval of suggestions")
    p.add_argument("--dry-run", action="store_true", help="Roll back instead of committing")
    return p.parse_args()


def agenda_fields(item: dict, detail: dict | None) -> dict:
    detail = detail or {}
    return {
        "title": item.get("title", "").strip(),
        "description": item.get("description", ""),
        "problem_statement": item.get("problem_statement"),
        "problem_statement_long": detail.get("problem_statement_long"),
        "category": item.get("category", "General"),
        "priority": item.get("priority", "Medium"),
        "timeline": item.get("timeline"),
        "key_points": detail.get("key_points") or item.get("key_points") or [],
    }


def main():
    args = parse_args()
    if not args.url:
        print("ERROR: Provide --url or set DATABASE_URL", file=sys.stderr)
        sys.exit(2)

    store = TranslationStore(args.locales)
    items = store.load_manifesto_summary(args.lang)
    if not items:
        print(f"ERROR: no manifesto items found under {args.locales}/{args.lang}", file=sys.stderr)
        sys.exit(3)

    print(f"[seed_agendas] Connecting to database: {args.url}")
    engine = create_engine(args.url)
    if args.create_tables:
        Base.metadata.create_all(bind=engine)
    session = sessionmaker(bind=engine)()

    created = updated = skipped = 0
    try:
        for item in items:
            try:
                number = int(item["id"])
            except (KeyError, TypeError, ValueError):
                print(f"WARN: skipping item without numeric id: {item.get('title')!r}")
                skipped += 1
                continue

            fields = agenda_fields(item, store.load_agenda_detail(args.lang, str(number)))
            existing = session.query(Agenda).filter(Agenda.sequence_id == number).first()
            if existing is None:
                session.add(Agenda(
                    id=generate_deterministic_uuid(to_manifesto_format(number)),
                    sequence_id=number,
                    **fields,
                ))
                created += 1
            elif args.update:
                for key, value in fields.items():
                    setattr(existing, key, value)
                updated += 1
            else:
                skipped += 1

        row = session.query(SystemSettings).filter(SystemSettings.id == 1).first()
        if row is None:
            row = SystemSettings(id=1, auto_approve_suggestions=False)
            session.add(row)
        if args.enable_auto_approve:
            row.auto_approve_suggestions = True

        if args.dry_run:
            session.rollback()
            print("[seed_agendas] Dry run; rolled back")
        else:
            session.commit()
    except Exception as e:
        session.rollback()
        print(f"ERROR: seeding failed: {e}", file=sys.stderr)
        sys.exit(4)
    finally:
        session.close()

    print(f"[seed_agendas] created={created} updated={updated} skipped={skipped}")


if __name__ == "__main__":
    main()
