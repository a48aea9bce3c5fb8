from __future__ import annotations

import logging

from dotenv import load_dotenv

from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .logging_config import setup_logging
from .settings import get_settings_module, load_settings_module

logger = logging.getLogger(__name__)


def create_container() -> Container:
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = load_settings_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"), getattr(settings, "LOG_FILE", None))

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    return build_container(settings)
