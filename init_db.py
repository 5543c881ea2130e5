#!/usr/bin/env python3
"""Initialize the iLO Admin history database"""

import config
from history import get_engine, init_db


def initialize_database(db_path: str = None):
    engine = get_engine(db_path)
    init_db(engine)
    print(f"Database tables created at {db_path or config.DB_PATH}")
    return engine


if __name__ == "__main__":
    initialize_database()
