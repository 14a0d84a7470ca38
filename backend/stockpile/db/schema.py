"""Database schema DDL. All tables use CREATE IF NOT EXISTS for idempotency."""

# item_events has no updated_at column and no foreign key to items: records
# outlive the rows they describe.
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS item_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id INTEGER,
    event_type TEXT NOT NULL,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_item_events_item_id ON item_events(item_id);
CREATE INDEX IF NOT EXISTS idx_item_events_event_type ON item_events(event_type);
CREATE INDEX IF NOT EXISTS idx_item_events_created_at ON item_events(created_at);

CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    quantity INTEGER NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_items_created_at ON items(created_at);
"""
