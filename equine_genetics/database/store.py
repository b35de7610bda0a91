"""Record store for breeds, animals and their care history."""

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Any

import structlog

from ..exceptions import DatabaseError, RecordNotFoundError
from ..models.animal import AnimalRecord
from ..models.breed import BreedProfile
from ..models.genotype import Phenotype
from ..models.ratings import AttributeRatings
from ..models.traits import TraitSet
from ..engines.epigenetics import AncestorRecord
from .connection import transaction

logger = structlog.get_logger(__name__)

_ANIMAL_COLUMNS = (
    'name', 'breed', 'age_days', 'sex', 'sire_id', 'dam_id', 'genotype', 'phenotype',
    'ratings', 'temperament', 'traits', 'influence_counters', 'bond_score',
    'stress_level', 'development_day', 'discipline', 'discipline_scores',
)


def _animal_values(animal: AnimalRecord) -> tuple:
    return (
        animal.name,
        animal.breed,
        animal.age_days,
        animal.sex,
        animal.sire_id,
        animal.dam_id,
        json.dumps(animal.genotype),
        json.dumps(animal.phenotype.to_dict()) if animal.phenotype else None,
        json.dumps(animal.ratings.to_dict()),
        animal.temperament,
        json.dumps(animal.traits.to_dict()),
        json.dumps(animal.influence_counters),
        animal.bond_score,
        animal.stress_level,
        animal.development_day,
        animal.discipline,
        json.dumps(animal.discipline_scores),
    )


def _row_to_animal(row: sqlite3.Row) -> AnimalRecord:
    phenotype = json.loads(row['phenotype']) if row['phenotype'] else None
    return AnimalRecord(
        animal_id=row['animal_id'],
        name=row['name'],
        breed=row['breed'],
        age_days=row['age_days'],
        sex=row['sex'],
        sire_id=row['sire_id'],
        dam_id=row['dam_id'],
        genotype=json.loads(row['genotype']),
        phenotype=Phenotype.from_dict(phenotype),
        ratings=AttributeRatings.from_dict(json.loads(row['ratings'])),
        temperament=row['temperament'],
        traits=TraitSet.from_dict(json.loads(row['traits'])),
        influence_counters=json.loads(row['influence_counters']),
        bond_score=row['bond_score'],
        stress_level=row['stress_level'],
        development_day=row['development_day'],
        discipline=row['discipline'],
        discipline_scores=json.loads(row['discipline_scores']),
    )


def _fetch_animal(cursor: sqlite3.Cursor, animal_id: int) -> AnimalRecord:
    cursor.execute("SELECT * FROM animals WHERE animal_id = ?", (animal_id,))
    row = cursor.fetchone()
    if row is None:
        raise RecordNotFoundError(f"Animal {animal_id} not found")
    return _row_to_animal(row)


def _write_animal(cursor: sqlite3.Cursor, animal: AnimalRecord) -> None:
    assignments = ', '.join(f"{column} = ?" for column in _ANIMAL_COLUMNS)
    cursor.execute(
        f"UPDATE animals SET {assignments}, updated_at = ? WHERE animal_id = ?",
        _animal_values(animal) + (datetime.now().isoformat(), animal.animal_id),
    )
    if cursor.rowcount == 0:
        raise RecordNotFoundError(f"Animal {animal.animal_id} not found")


class AnimalTransaction:
    """
    An animal loaded under the write lock.

    Changes made to ``animal`` are written back when the transaction block
    exits without error.
    """

    def __init__(self, cursor: sqlite3.Cursor, animal: AnimalRecord):
        self.cursor = cursor
        self.animal = animal

    def log_caregiving_task(self, task_type: str, duration: int, fixed_traits: List[Dict[str, Any]]) -> int:
        self.cursor.execute("""
            INSERT INTO caregiving_tasks (animal_id, task_type, duration, age_days, fixed_traits)
            VALUES (?, ?, ?, ?, ?)
        """, (self.animal.animal_id, task_type, duration, self.animal.age_days, json.dumps(fixed_traits)))
        return self.cursor.lastrowid

    def record_discovery_event(self, event) -> int:
        """Persist a DiscoveryEvent for this animal."""
        data = event.to_dict()
        self.cursor.execute("""
            INSERT INTO trait_discovery_events (
                animal_id, development_day, conditions_met, traits_revealed, summary
            ) VALUES (?, ?, ?, ?, ?)
        """, (
            self.animal.animal_id,
            data['development_day'],
            json.dumps(data['conditions_met']),
            json.dumps(data['traits_revealed']),
            data['summary'],
        ))
        return self.cursor.lastrowid


class AnimalStore:
    """SQLite-backed record store."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # Breeds

    def save_breed(self, profile: BreedProfile) -> None:
        """Insert or replace a breed profile by name."""
        with transaction(self.conn) as cursor:
            cursor.execute("""
                INSERT INTO breeds (name, profile) VALUES (?, ?)
                ON CONFLICT(name) DO UPDATE SET profile = excluded.profile
            """, (profile.name, json.dumps(profile.to_dict())))

    def get_breed(self, name: str) -> BreedProfile:
        """
        Load a breed profile.

        Raises:
            RecordNotFoundError: If no breed has this name
        """
        row = self.conn.execute("SELECT profile FROM breeds WHERE name = ?", (name,)).fetchone()
        if row is None:
            raise RecordNotFoundError(f"Breed {name!r} not found")
        return BreedProfile.from_config(name, json.loads(row['profile']))

    def find_breed(self, name: str) -> Optional[BreedProfile]:
        """
        Load a breed profile for animal creation.

        Returns None when the breed is unknown, or when its stored profile is
        malformed (logged as an error); callers fall back to default values.
        """
        try:
            return self.get_breed(name)
        except RecordNotFoundError:
            return None
        except (TypeError, ValueError) as e:
            logger.error("breed_profile_invalid", breed=name, error=str(e))
            return None

    # Animals

    def add_animal(self, animal: AnimalRecord) -> int:
        """
        Insert a new animal and assign its animal_id.

        Args:
            animal: Record without an id

        Returns:
            New animal_id
        """
        placeholders = ', '.join('?' for _ in _ANIMAL_COLUMNS)
        with transaction(self.conn) as cursor:
            cursor.execute(
                f"INSERT INTO animals ({', '.join(_ANIMAL_COLUMNS)}) VALUES ({placeholders})",
                _animal_values(animal),
            )
            animal.animal_id = cursor.lastrowid
        logger.debug("animal_saved", animal_id=animal.animal_id, breed=animal.breed)
        return animal.animal_id

    def get_animal(self, animal_id: int) -> AnimalRecord:
        """
        Load an animal.

        Raises:
            RecordNotFoundError: If the id is unknown
        """
        return _fetch_animal(self.conn.cursor(), animal_id)

    def update_animal(self, animal: AnimalRecord) -> None:
        if animal.animal_id is None:
            raise DatabaseError("Cannot update an animal that has not been saved")
        with transaction(self.conn) as cursor:
            _write_animal(cursor, animal)

    @contextmanager
    def animal_transaction(self, animal_id: int) -> Iterator[AnimalTransaction]:
        """
        Load an animal under an immediate write lock and save it on exit.

        Concurrent callers for the same database serialize here, so two
        caregiving updates never read the same counters.

        Args:
            animal_id: Animal to lock

        Yields:
            AnimalTransaction

        Raises:
            RecordNotFoundError: If the id is unknown
            DatabaseError: If a statement fails
        """
        with transaction(self.conn, immediate=True) as cursor:
            txn = AnimalTransaction(cursor, _fetch_animal(cursor, animal_id))
            yield txn
            _write_animal(cursor, txn.animal)

    def get_ancestors(self, animal_id: int, generations: int) -> List[AncestorRecord]:
        """
        Walk the pedigree upward from an animal.

        The animal itself is generation 1, its parents generation 2, and so
        on. An ancestor reachable through several paths is reported once, at
        its nearest generation.

        Args:
            animal_id: Starting animal
            generations: Deepest generation returned

        Returns:
            AncestorRecords ordered by generation then id

        Raises:
            DatabaseError: If the pedigree cannot be read
        """
        found: Dict[int, AncestorRecord] = {}
        frontier = [animal_id]
        generation = 1
        while frontier and generation <= generations:
            placeholders = ', '.join('?' for _ in frontier)
            try:
                rows = self.conn.execute(
                    f"SELECT * FROM animals WHERE animal_id IN ({placeholders})", frontier
                ).fetchall()
            except sqlite3.Error as e:
                raise DatabaseError(f"Failed to read pedigree of animal {animal_id}: {e}") from e
            next_frontier = []
            for row in rows:
                if row['animal_id'] in found:
                    continue
                animal = _row_to_animal(row)
                found[animal.animal_id] = AncestorRecord(
                    animal_id=animal.animal_id,
                    generation=generation,
                    discipline=animal.discipline,
                    discipline_scores=dict(animal.discipline_scores),
                )
                next_frontier.extend(p for p in (animal.sire_id, animal.dam_id)
                                     if p is not None and p not in found)
            frontier = sorted(set(next_frontier))
            generation += 1
        return sorted(found.values(), key=lambda a: (a.generation, a.animal_id))

    # Care history

    def log_activity(self, animal_id: int, activity: str, development_day: Optional[int] = None) -> int:
        """Record a completed enrichment activity."""
        with transaction(self.conn) as cursor:
            if development_day is None:
                development_day = _fetch_animal(cursor, animal_id).development_day
            cursor.execute("""
                INSERT INTO animal_activities (animal_id, activity, development_day)
                VALUES (?, ?, ?)
            """, (animal_id, activity, development_day))
            return cursor.lastrowid

    def get_activities(self, animal_id: int) -> List[str]:
        rows = self.conn.execute(
            "SELECT activity FROM animal_activities WHERE animal_id = ? ORDER BY activity_id",
            (animal_id,),
        ).fetchall()
        return [row['activity'] for row in rows]

    def get_caregiving_tasks(self, animal_id: int) -> List[Dict[str, Any]]:
        rows = self.conn.execute("""
            SELECT task_id, task_type, duration, age_days, fixed_traits, created_at
            FROM caregiving_tasks WHERE animal_id = ? ORDER BY task_id
        """, (animal_id,)).fetchall()
        return [
            {**dict(row), 'fixed_traits': json.loads(row['fixed_traits'])}
            for row in rows
        ]

    def get_discovery_events(self, animal_id: int) -> List[Dict[str, Any]]:
        rows = self.conn.execute("""
            SELECT event_id, development_day, conditions_met, traits_revealed, summary, created_at
            FROM trait_discovery_events WHERE animal_id = ? ORDER BY event_id
        """, (animal_id,)).fetchall()
        return [
            {
                **dict(row),
                'conditions_met': json.loads(row['conditions_met']),
                'traits_revealed': json.loads(row['traits_revealed']),
            }
            for row in rows
        ]
