from __future__ import annotations

import sys

from bizboost.core.config import settings
from bizboost.core.errors import DirectoryError
from bizboost.core.logging_config import configure_logging, parse_module_levels
from bizboost.db.session import EntityStore
from bizboost.services.directory import Directory
from bizboost.services.captcha import ChallengeService


def main() -> int:
    database_url = sys.argv[1] if len(sys.argv) > 1 else settings.database_url
    if len(sys.argv) > 2:
        print("Usage: python scripts/seed_sample_data.py [database_url]")
        return 2

    configure_logging(
        log_dir=settings.log_dir,
        level=settings.log_level,
        module_levels=parse_module_levels(settings.log_levels),
    )

    store = EntityStore(database_url, busy_timeout=settings.sqlite_busy_timeout_seconds)
    directory = Directory(store, ChallengeService(), settings=settings)
    try:
        store.create_all()
        created = directory.generate_sample_data()
    except DirectoryError as exc:
        print(f"Seeding failed: {exc.message}")
        return 1
    finally:
        directory.close()

    if created:
        print(f"Seeded {created} businesses into {database_url}")
    else:
        print("Directory already has businesses; nothing seeded")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
