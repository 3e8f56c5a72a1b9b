"""Create the database and tables. Run from the repository root: python -m scripts.init_db"""

from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from config import get_settings_module

from src.staff_attendance.staff_attendance.database.bootstrap import apply_schema
from src.staff_attendance.staff_attendance.database.connection import DBConfig

logger = logging.getLogger("init_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))

    count = apply_schema(config)
    logger.info("Schema ready on %s@%s:%s/%s (%s statements)", config.user, config.host, config.port, config.database, count)


if __name__ == "__main__":
    main()
