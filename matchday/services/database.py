"""TinyDB database service for team data"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional
import uuid

from tinydb import TinyDB, Query

logger = logging.getLogger(__name__)


class Database:
    """Database service using TinyDB"""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db: Optional[TinyDB] = None

    def initialize(self):
        """Initialize database connection"""
        if self.db is not None:
            return
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.db = TinyDB(str(self.db_path))
        logger.info(f"Database connected: {self.db_path}")

    def close(self):
        if self.db is not None:
            self.db.close()
            self.db = None

    @property
    def teams(self):
        return self.db.table("teams")

    @property
    def members(self):
        return self.db.table("members")

    @property
    def matches(self):
        return self.db.table("matches")

    @property
    def availability(self):
        return self.db.table("availability")

    @property
    def predictions(self):
        return self.db.table("predictions")

    def generate_id(self) -> str:
        return str(uuid.uuid4())[:8]

    def timestamp(self) -> str:
        return datetime.utcnow().isoformat()


# Query helper
Q = Query()
