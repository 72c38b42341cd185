"""
Process startup: configure logging, validate configuration and build the
ContentStore the request layer will hold on to.
"""

import logging
from typing import Optional

from inkwell.core.config import Settings, settings, validate_config
from inkwell.core.database import Database
from inkwell.core.logging import configure_logging
from inkwell.store import ContentStore


def create_store(cfg: Optional[Settings] = None, *, create_tables: bool = True) -> ContentStore:
    cfg = cfg or settings
    configure_logging(cfg.ENV, cfg.LOG_LEVEL)
    validate_config(strict=cfg.CONFIG_STRICT, settings_obj=cfg)

    db = Database.from_settings(cfg)
    if create_tables:
        db.create_all()

    logging.getLogger("inkwell").info(f"Content store ready ({db.dialect})")
    return ContentStore(
        db,
        feed_limit=cfg.FEED_LIMIT,
        notification_limit=cfg.NOTIFICATION_LIMIT,
    )
