"""Tests for database layer."""

import json
import sqlite3
import tempfile
from pathlib import Path

import pytest
from structlog.testing import capture_logs

from equine_genetics.database import create_database, get_db_connection, transaction
from equine_genetics.database.schema import drop_schema
from equine_genetics.engines.discovery import DiscoveryEvent, RevealedTrait
from equine_genetics.exceptions import DatabaseError, RecordNotFoundError
from equine_genetics.models.animal import AnimalRecord
from equine_genetics.models.traits import TraitSet


def _horse(name, sex='mare', sire_id=None, dam_id=None, age_days=2000, **kwargs):
    return AnimalRecord(name=name, breed='Thoroughbred', age_days=age_days, sex=sex,
                        sire_id=sire_id, dam_id=dam_id, **kwargs)


def test_create_database():
    """Test database creation."""
    with tempfile.TemporaryDirectory() as tmp:
        db_path = Path(tmp) / 'nested' / 'stable.db'
        conn = create_database(str(db_path))
        assert db_path.exists()

        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table'")
        tables = [row[0] for row in cursor.fetchall()]

        expected_tables = [
            'breeds', 'animals', 'animal_activities', 'caregiving_tasks', 'trait_discovery_events',
        ]
        for table in expected_tables:
            assert table in tables

        conn.close()


def test_get_db_connection():
    """Test getting database connection."""
    conn = get_db_connection(':memory:')
    assert conn.execute("PRAGMA foreign_keys").fetchone()[0] == 1
    assert conn.row_factory is sqlite3.Row
    conn.close()


def test_schema_foreign_keys(store):
    """Test that foreign keys are enforced."""
    with pytest.raises(sqlite3.IntegrityError):
        store.conn.execute("""
            INSERT INTO caregiving_tasks (animal_id, task_type, duration, age_days)
            VALUES (999, 'grooming', 10, 0)
        """)


def test_schema_rejects_out_of_range_bond(store):
    animal_id = store.add_animal(_horse('Belle'))
    with pytest.raises(sqlite3.IntegrityError):
        store.conn.execute("UPDATE animals SET bond_score = 150 WHERE animal_id = ?", (animal_id,))


def test_drop_schema(store):
    drop_schema(store.conn)
    tables = store.conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='animals'")
    assert tables.fetchall() == []


def test_breed_round_trip(store, breed_profile):
    loaded = store.get_breed('Thoroughbred')
    assert loaded.to_dict() == breed_profile.to_dict()
    assert store.find_breed('Clydesdale') is None
    with pytest.raises(RecordNotFoundError):
        store.get_breed('Clydesdale')


def test_save_breed_replaces(store, breed_profile):
    breed_profile.temperament_weights = {'Calm': 1}
    store.save_breed(breed_profile)
    assert store.get_breed('Thoroughbred').temperament_weights == {'Calm': 1}
    count = store.conn.execute("SELECT COUNT(*) FROM breeds WHERE name = 'Thoroughbred'").fetchone()[0]
    assert count == 1


def test_animal_round_trip(store):
    horse = _horse(
        'Belle',
        genotype={'E_Extension': 'E/e', 'sooty': True},
        temperament='Calm',
        traits=TraitSet(positive={'calm'}, hidden={'bold'}, epigenetic={'calm'}),
        influence_counters={'nervous': -2},
        discipline_scores={'Dressage': 70.0},
    )
    animal_id = store.add_animal(horse)
    assert horse.animal_id == animal_id

    loaded = store.get_animal(animal_id)
    assert loaded.to_dict() == horse.to_dict()


def test_get_missing_animal(store):
    with pytest.raises(RecordNotFoundError):
        store.get_animal(42)


def test_update_animal(store):
    horse = _horse('Belle')
    store.add_animal(horse)
    horse.bond_score = 85
    store.update_animal(horse)
    assert store.get_animal(horse.animal_id).bond_score == 85

    with pytest.raises(DatabaseError):
        store.update_animal(_horse('Unsaved'))


def test_animal_transaction_writes_back(store):
    animal_id = store.add_animal(_horse('Belle'))
    with store.animal_transaction(animal_id) as txn:
        txn.animal.influence_counters = {'calm': 2}
        txn.log_caregiving_task('daily_care', 15, [])

    assert store.get_animal(animal_id).influence_counters == {'calm': 2}
    tasks = store.get_caregiving_tasks(animal_id)
    assert [(t['task_type'], t['duration'], t['age_days']) for t in tasks] == [('daily_care', 15, 2000)]


def test_animal_transaction_rolls_back_on_error(store):
    animal_id = store.add_animal(_horse('Belle'))
    with pytest.raises(RuntimeError):
        with store.animal_transaction(animal_id) as txn:
            txn.animal.influence_counters = {'calm': 2}
            txn.log_caregiving_task('daily_care', 15, [])
            raise RuntimeError("interrupted")

    assert store.get_animal(animal_id).influence_counters == {}
    assert store.get_caregiving_tasks(animal_id) == []


def test_transaction_wraps_sqlite_errors(store):
    with pytest.raises(DatabaseError):
        with transaction(store.conn) as cursor:
            cursor.execute("INSERT INTO missing_table VALUES (1)")


def test_animal_transaction_missing_animal(store):
    with pytest.raises(RecordNotFoundError):
        with store.animal_transaction(99):
            pass


def test_discovery_event_persisted(store):
    animal_id = store.add_animal(_horse('Belle', age_days=10))
    event = DiscoveryEvent(
        animal_id=animal_id,
        development_day=3,
        conditions_met=['high_bonding'],
        traits_revealed=[RevealedTrait('calm', 'positive', 'high_bonding')],
    )
    with store.animal_transaction(animal_id) as txn:
        txn.record_discovery_event(event)

    events = store.get_discovery_events(animal_id)
    assert len(events) == 1
    assert events[0]['conditions_met'] == ['high_bonding']
    assert events[0]['traits_revealed'][0]['trait'] == 'calm'
    assert events[0]['summary'] == 'Revealed 1 traits via 1 conditions'


def test_activities(store):
    animal_id = store.add_animal(_horse('Belle', development_day=2))
    store.log_activity(animal_id, 'exercise')
    store.log_activity(animal_id, 'free_play', development_day=3)
    assert store.get_activities(animal_id) == ['exercise', 'free_play']
    day = store.conn.execute("SELECT development_day FROM animal_activities ORDER BY activity_id").fetchone()
    assert day[0] == 2

    with pytest.raises(RecordNotFoundError):
        store.log_activity(99, 'exercise')


def test_get_ancestors(store):
    """The animal is generation 1; a shared grandparent is reported once at its nearest depth."""
    grandsire = store.add_animal(_horse('Old Timer', sex='stallion', discipline='Racing'))
    granddam = store.add_animal(_horse('Granny'))
    sire = store.add_animal(_horse('Dad', sex='stallion', sire_id=grandsire, dam_id=granddam))
    dam = store.add_animal(_horse('Mum', sire_id=grandsire))
    foal = store.add_animal(_horse('Kid', sex='colt', sire_id=sire, dam_id=dam))

    ancestors = store.get_ancestors(foal, generations=3)
    assert [(a.animal_id, a.generation) for a in ancestors] == [
        (foal, 1), (sire, 2), (dam, 2), (grandsire, 3), (granddam, 3),
    ]
    assert ancestors[3].discipline == 'Racing'

    assert [a.animal_id for a in store.get_ancestors(foal, generations=2)] == [foal, sire, dam]
    assert store.get_ancestors(999, generations=3) == []


def test_get_ancestors_wraps_sqlite_errors(store):
    animal_id = store.add_animal(_horse('Belle'))
    drop_schema(store.conn)
    with pytest.raises(DatabaseError):
        store.get_ancestors(animal_id, generations=3)


def test_find_breed_malformed_profile(store):
    """Unparseable stored profiles read as absent, with an error log."""
    rows = [
        ('Listy', json.dumps({'rating_profiles': {'gaits': [1, 2]}})),
        ('Flat', json.dumps([1, 2])),
        ('Bad Genetics', json.dumps({'genetics': ['E/e']})),
    ]
    for name, profile in rows:
        store.conn.execute("INSERT INTO breeds (name, profile) VALUES (?, ?)", (name, profile))
        with capture_logs() as logs:
            assert store.find_breed(name) is None
        assert logs[0]['event'] == 'breed_profile_invalid'
        assert logs[0]['log_level'] == 'error'

    with capture_logs() as logs:
        assert store.find_breed('Clydesdale') is None
    assert logs == []
