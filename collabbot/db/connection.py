"""Database connection and schema management."""

import duckdb
from typing import Optional
from pathlib import Path
from ..utils.logger import get_app_logger


class DatabaseConnection:
    """DuckDB connection manager."""

    def __init__(self, db_path: str = "./data/collab.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to DuckDB database file

        Raises:
            Exception: If the database cannot be opened or the schema created
        """
        self.db_path = db_path
        self.logger = get_app_logger("db")
        self.conn: Optional[duckdb.DuckDBPyConnection] = None

        # Ensure database directory exists
        db_dir = Path(db_path).parent
        db_dir.mkdir(parents=True, exist_ok=True)

        self._connect()
        self._init_schema()

    def _connect(self):
        """Connect to DuckDB database."""
        try:
            self.conn = duckdb.connect(self.db_path)
            self.logger.info(f"Connected to DuckDB at {self.db_path}")
        except Exception as e:
            self.logger.error(f"Failed to connect to DuckDB: {e}")
            raise

    def _init_schema(self):
        """Initialize database schema."""
        try:
            self.conn.execute("CREATE SEQUENCE IF NOT EXISTS messages_id_seq START 1")
            self.conn.execute("CREATE SEQUENCE IF NOT EXISTS action_items_id_seq START 1")

            # Aggregate conversation snapshots
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    key VARCHAR PRIMARY KEY,
                    value JSON NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)

            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS messages (
                    id BIGINT PRIMARY KEY,
                    conversation_id VARCHAR NOT NULL,
                    role VARCHAR NOT NULL,
                    content VARCHAR NOT NULL,
                    timestamp TIMESTAMP NOT NULL
                )
            """)

            # Columns added after the first release
            self._add_column("messages", "name", "VARCHAR DEFAULT 'Unknown'")
            self._add_column("messages", "activity_id", "VARCHAR")

            # No primary key: status updates rewrite indexed rows
            self.conn.execute("""
                CREATE TABLE IF NOT EXISTS action_items (
                    id BIGINT NOT NULL,
                    conversation_id VARCHAR NOT NULL,
                    title VARCHAR NOT NULL,
                    description VARCHAR NOT NULL,
                    assigned_to VARCHAR NOT NULL,
                    assigned_to_id VARCHAR,
                    assigned_by VARCHAR NOT NULL,
                    assigned_by_id VARCHAR,
                    status VARCHAR NOT NULL DEFAULT 'pending',
                    priority VARCHAR NOT NULL DEFAULT 'medium',
                    due_date VARCHAR,
                    created_at TIMESTAMP NOT NULL,
                    updated_at TIMESTAMP NOT NULL,
                    source_message_ids JSON
                )
            """)

            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_conversation ON messages(conversation_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_messages_timestamp ON messages(timestamp)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_action_items_conversation ON action_items(conversation_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_action_items_assigned_to ON action_items(assigned_to)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_action_items_assigned_to_id ON action_items(assigned_to_id)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_action_items_status ON action_items(status)")
            self.conn.execute("CREATE INDEX IF NOT EXISTS idx_action_items_due_date ON action_items(due_date)")

            self.logger.info("Database schema initialized successfully")

        except Exception as e:
            self.logger.error(f"Failed to initialize database schema: {e}")
            raise

    def _add_column(self, table: str, column: str, definition: str):
        """Add a column to an existing table; an existing column is left alone."""
        try:
            self.conn.execute(f"ALTER TABLE {table} ADD COLUMN {column} {definition}")
            self.logger.debug(f"Added column {table}.{column}")
        except duckdb.CatalogException as e:
            if "already exists" not in str(e):
                raise
            self.logger.debug(f"Column {table}.{column} already exists")

    def close(self):
        """Close database connection."""
        if self.conn:
            self.conn.close()
            self.conn = None
            self.logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
