"""Database schema creation for equine_genetics."""

import sqlite3

from ..exceptions import DatabaseError


def create_schema(conn: sqlite3.Connection) -> None:
    """
    Create all database tables, indexes, and constraints.

    Args:
        conn: SQLite database connection

    Raises:
        DatabaseError: If schema creation fails
    """
    try:
        cursor = conn.cursor()
        cursor.execute("PRAGMA foreign_keys = ON")
        cursor.execute("BEGIN")

        # 1. Breeds table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS breeds (
                breed_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL UNIQUE,
                profile JSON NOT NULL,
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
        """)

        # 2. Animals table
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS animals (
                animal_id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                breed TEXT NOT NULL,
                age_days INTEGER NOT NULL CHECK(age_days >= 0) DEFAULT 0,
                sex TEXT CHECK(sex IN ('stallion', 'mare', 'gelding', 'colt', 'filly')) NULL,
                sire_id INTEGER NULL,
                dam_id INTEGER NULL,
                genotype JSON NOT NULL DEFAULT '{}',
                phenotype JSON NULL,
                ratings JSON NOT NULL DEFAULT '{}',
                temperament TEXT NULL,
                traits JSON NOT NULL DEFAULT '{}',
                influence_counters JSON NOT NULL DEFAULT '{}',
                bond_score REAL NOT NULL CHECK(bond_score >= 0 AND bond_score <= 100) DEFAULT 50,
                stress_level REAL NOT NULL CHECK(stress_level >= 0 AND stress_level <= 100) DEFAULT 0,
                development_day INTEGER NOT NULL CHECK(development_day >= 0) DEFAULT 0,
                discipline TEXT NULL,
                discipline_scores JSON NOT NULL DEFAULT '{}',
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (sire_id) REFERENCES animals(animal_id) ON DELETE SET NULL,
                FOREIGN KEY (dam_id) REFERENCES animals(animal_id) ON DELETE SET NULL,
                CHECK(sire_id IS NULL OR dam_id IS NULL OR sire_id != dam_id)
            )
        """)

        # 3. Enrichment activity log
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS animal_activities (
                activity_id INTEGER PRIMARY KEY AUTOINCREMENT,
                animal_id INTEGER NOT NULL,
                activity TEXT NOT NULL,
                development_day INTEGER NOT NULL CHECK(development_day >= 0),
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (animal_id) REFERENCES animals(animal_id) ON DELETE CASCADE
            )
        """)

        # 4. Caregiving task log
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS caregiving_tasks (
                task_id INTEGER PRIMARY KEY AUTOINCREMENT,
                animal_id INTEGER NOT NULL,
                task_type TEXT NOT NULL,
                duration INTEGER NOT NULL CHECK(duration >= 0),
                age_days INTEGER NOT NULL CHECK(age_days >= 0),
                fixed_traits JSON NOT NULL DEFAULT '[]',
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (animal_id) REFERENCES animals(animal_id) ON DELETE CASCADE
            )
        """)

        # 5. Trait discovery audit events
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS trait_discovery_events (
                event_id INTEGER PRIMARY KEY AUTOINCREMENT,
                animal_id INTEGER NOT NULL,
                development_day INTEGER NOT NULL CHECK(development_day >= 0),
                conditions_met JSON NOT NULL,
                traits_revealed JSON NOT NULL,
                summary TEXT NOT NULL,
                created_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP,
                FOREIGN KEY (animal_id) REFERENCES animals(animal_id) ON DELETE CASCADE
            )
        """)

        # Indexes
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_animals_breed ON animals(breed)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_animals_parents ON animals(sire_id, dam_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_activities_animal ON animal_activities(animal_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_caregiving_animal ON caregiving_tasks(animal_id, created_at)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_discovery_animal ON trait_discovery_events(animal_id)")

        conn.commit()

    except sqlite3.Error as e:
        conn.rollback()
        raise DatabaseError(f"Failed to create database schema: {e}") from e


def drop_schema(conn: sqlite3.Connection) -> None:
    """
    Drop all database tables (for testing/cleanup).

    Args:
        conn: SQLite database connection
    """
    cursor = conn.cursor()

    # Reverse order (respecting foreign key dependencies)
    tables = [
        'trait_discovery_events',
        'caregiving_tasks',
        'animal_activities',
        'animals',
        'breeds',
    ]

    for table in tables:
        cursor.execute(f"DROP TABLE IF EXISTS {table}")

    conn.commit()
