#!/usr/bin/env python3
"""
Quick checks before starting the notifier. Run from the project root:
  python scripts/check_backend.py
"""
import os
import sys
from pathlib import Path

project_dir = Path(__file__).resolve().parent.parent
os.chdir(project_dir)
if str(project_dir) not in sys.path:
    sys.path.insert(0, str(project_dir))


def main():
    errors = []

    # 1) .env
    if not (project_dir / ".env").exists():
        errors.append(".env missing. Copy .env.example and set DATABASE_URL, push credentials, AUTH_JWT_SECRET.")
    else:
        print("OK  .env exists")

    # 2) DB connection and schema
    try:
        from sqlalchemy import inspect

        from engagement.db.session import engine
        from engagement.db.tables import ALL_TABLE_NAMES

        existing = set(inspect(engine).get_table_names())
        missing = [t for t in ALL_TABLE_NAMES if t not in existing]
        if missing:
            errors.append(f"Tables missing: {', '.join(missing)}. Run: alembic upgrade head")
            print("FAIL Tables missing:", ", ".join(missing))
        else:
            print("OK  Database connection and tables (DATABASE_URL)")
    except Exception as e:
        errors.append(f"Database: {e}")
        print("FAIL Database:", e)

    # 3) Push provider
    from engagement.config import settings
    from engagement.services.push.registry import get_push_provider

    provider = get_push_provider()
    if provider.provider_id == "log" and settings.push_provider != "log":
        errors.append(f"PUSH_PROVIDER={settings.push_provider} has no usable credentials; pushes will only be logged.")
        print("FAIL Push provider not configured")
    else:
        print(f"OK  Push provider: {provider.provider_id}")

    # 4) Broadcast auth
    if not settings.auth_jwt_secret:
        errors.append("AUTH_JWT_SECRET not set; every manual broadcast will be rejected as unauthenticated.")
        print("FAIL AUTH_JWT_SECRET not set")
    else:
        print("OK  AUTH_JWT_SECRET set")

    # 5) App import (catches missing deps, bad imports)
    try:
        from engagement.main import app  # noqa: F401
        print("OK  App import (engagement.main)")
    except Exception as e:
        errors.append(f"App import: {e}")
        print("FAIL App import:", e)

    if errors:
        print("\n---")
        for e in errors:
            print("•", e)
        return 1

    print("\nAll checks passed. Start with: uvicorn engagement.main:app --host 0.0.0.0 --port 8000")
    return 0


if __name__ == "__main__":
    sys.exit(main())
