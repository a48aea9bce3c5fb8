from __future__ import annotations

from dotenv import load_dotenv

from worksite_tracking.database.bootstrap import apply_schema, list_tables
from worksite_tracking.logging_config import setup_logging
from worksite_tracking.settings import load_settings_module


def main() -> None:
    load_dotenv(override=False)
    settings = load_settings_module()
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
