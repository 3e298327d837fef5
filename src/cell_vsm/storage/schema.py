"""DuckDB schema definitions for saved value stream maps."""

SCHEMA_DDL = """
-- VSM_CONFIGURATIONS: one row per saved value stream map
CREATE TABLE IF NOT EXISTS vsm_configurations (
    id VARCHAR PRIMARY KEY,
    name VARCHAR NOT NULL,
    description VARCHAR,
    status VARCHAR DEFAULT 'active',
    -- Stations, raw material rate and operation names (JSON blob)
    stations_json JSON NOT NULL,
    -- Snapshot taken at save time, never authoritative
    bottleneck_rate DOUBLE,
    process_efficiency DOUBLE,
    notes VARCHAR,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL
);
"""

INDEX_DDL = """
CREATE INDEX IF NOT EXISTS idx_vsm_updated_at ON vsm_configurations(updated_at);
"""

VIEW_DDL = """
-- List view summary (snapshot values only)
CREATE OR REPLACE VIEW v_vsm_summary AS
SELECT id, name, status, bottleneck_rate, process_efficiency, updated_at
FROM vsm_configurations
ORDER BY updated_at DESC;
"""


def create_tables(conn) -> None:
    """Create all tables, indexes, and views in the database.

    Args:
        conn: DuckDB connection
    """
    conn.execute(SCHEMA_DDL)
    conn.execute(INDEX_DDL)
    conn.execute(VIEW_DDL)
