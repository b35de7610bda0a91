"""Animal creation flow and care operations on top of the record store."""

import threading
from typing import List, Optional, Sequence

import numpy as np
import structlog

from .config import EngineConfig, DEFAULT_CONFIG, load_config, load_breed_profiles
from .exceptions import EquineGeneticsError, IneligibleAnimalError
from .database import AnimalStore, create_database
from .engines.discovery import (
    DiscoveryResult, DiscoveryProgress, BatchDiscoveryOutcome,
    reveal_traits as run_discovery, get_discovery_progress,
)
from .engines.epigenetics import apply_epigenetic_traits_at_birth
from .engines.genetics import generate_store_genotype, calculate_foal_genotype
from .engines.influence import InfluenceResult, apply_caregiving_influence
from .engines.phenotype import determine_phenotype
from .engines.ratings import generate_store_horse_ratings, calculate_foal_ratings
from .engines.temperament import determine_store_horse_temperament, determine_foal_temperament
from .models.animal import AnimalRecord, DAYS_PER_YEAR
from .models.traits import TraitSet
from .rng import spawn_rng

logger = structlog.get_logger(__name__)

SIRE_SEXES = ('stallion', 'colt')
DAM_SEXES = ('mare', 'filly')


class BreedingService:
    """Creates animals through the engines and persists them in an AnimalStore."""

    def __init__(
        self,
        store: AnimalStore,
        config: EngineConfig = DEFAULT_CONFIG,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
    ):
        """
        Args:
            store: Record store
            config: Engine configuration
            rng: Caller-owned random source used by every operation. When None,
                each operation gets its own generator spawned from ``seed``.
            seed: Optional seed for reproducible runs; ignored when rng is given
        """
        self.store = store
        self.config = config
        self._rng = rng
        self._seeds = np.random.SeedSequence(seed)
        self._seeds_lock = threading.Lock()

    def operation_rng(self) -> np.random.Generator:
        """Random source for one creation operation."""
        if self._rng is not None:
            return self._rng
        with self._seeds_lock:
            return spawn_rng(self._seeds)

    @classmethod
    def from_paths(
        cls,
        db_path: str,
        config_path: Optional[str] = None,
        breeds_path: Optional[str] = None,
        seed: Optional[int] = None,
    ) -> 'BreedingService':
        """
        Open (or create) a database and load configuration files.

        Args:
            db_path: SQLite database path
            config_path: Optional engine configuration file (YAML/JSON)
            breeds_path: Optional breed profile file; profiles are saved to the store
            seed: Optional seed for reproducible runs

        Returns:
            BreedingService instance
        """
        config = load_config(config_path) if config_path else DEFAULT_CONFIG
        store = AnimalStore(create_database(db_path))
        if breeds_path:
            for profile in load_breed_profiles(breeds_path).values():
                store.save_breed(profile)
        return cls(store, config, seed=seed)

    def create_store_horse(
        self,
        breed: str,
        name: str,
        sex: Optional[str] = None,
        age_days: int = 0,
    ) -> AnimalRecord:
        """
        Create and persist a horse with no recorded parents.

        Args:
            breed: Breed name
            name: Horse name
            sex: Optional sex
            age_days: Age in days

        Returns:
            Saved AnimalRecord
        """
        rng = self.operation_rng()
        # A missing profile is reported once, by the ratings engine
        profile = self.store.find_breed(breed)

        genotype = generate_store_genotype(profile, rng, self.config.genetics)
        animal = AnimalRecord(
            name=name,
            breed=breed,
            age_days=age_days,
            sex=sex,
            genotype=genotype,
            phenotype=determine_phenotype(genotype, profile, age_days / DAYS_PER_YEAR),
            ratings=generate_store_horse_ratings(profile, rng, self.config.ratings),
            temperament=determine_store_horse_temperament(
                profile.temperament_weights if profile else None, rng, self.config.temperament
            ),
        )
        self.store.add_animal(animal)
        logger.info("store_horse_created", animal_id=animal.animal_id, breed=breed,
                    color=animal.phenotype.display_color, temperament=animal.temperament)
        return animal

    def _parents(self, sire_id: int, dam_id: int):
        sire = self.store.get_animal(sire_id)
        dam = self.store.get_animal(dam_id)
        if sire.sex is not None and sire.sex not in SIRE_SEXES:
            raise IneligibleAnimalError(f"Animal {sire_id} ({sire.sex}) cannot sire a foal")
        if dam.sex is not None and dam.sex not in DAM_SEXES:
            raise IneligibleAnimalError(f"Animal {dam_id} ({dam.sex}) cannot carry a foal")
        return sire, dam

    def _birth_traits(self, sire: AnimalRecord, dam: AnimalRecord, rng,
                      mare_stress: Optional[float], feed_quality: Optional[float]) -> TraitSet:
        """Lineage lookup plus the epigenetic engine; any failure yields an empty TraitSet."""
        depth = self.config.epigenetics.inbreeding_generations
        try:
            result = apply_epigenetic_traits_at_birth(
                sire.animal_id,
                dam.animal_id,
                self.store.get_ancestors(sire.animal_id, depth),
                self.store.get_ancestors(dam.animal_id, depth),
                rng,
                mare_stress=mare_stress,
                feed_quality=feed_quality,
                config=self.config.epigenetics,
            )
        except Exception as e:
            logger.error("epigenetic_traits_failed", sire_id=sire.animal_id,
                         dam_id=dam.animal_id, error_type=type(e).__name__, error=str(e))
            return TraitSet()
        return result.traits

    def create_foal(
        self,
        sire_id: int,
        dam_id: int,
        name: str,
        mare_stress: Optional[float] = None,
        feed_quality: Optional[float] = None,
    ) -> AnimalRecord:
        """
        Breed a foal from two stored parents and persist it.

        The foal takes the dam's breed. Engines run in order: genotype,
        phenotype, ratings, temperament, then at-birth epigenetic traits.
        A failed lineage lookup or epigenetic engine failure is logged and
        leaves the trait set empty.

        Args:
            sire_id: Sire animal id
            dam_id: Dam animal id
            name: Foal name
            mare_stress: Dam's stress during pregnancy (0-100)
            feed_quality: Dam's feed quality during pregnancy (0-100)

        Returns:
            Saved foal AnimalRecord

        Raises:
            RecordNotFoundError: If a parent does not exist
            IneligibleAnimalError: If a parent's sex does not fit its role
            MissingParentDataError: If a parent has no genotype
        """
        if sire_id == dam_id:
            raise IneligibleAnimalError("Sire and dam must be different animals")
        sire, dam = self._parents(sire_id, dam_id)
        rng = self.operation_rng()
        profile = self.store.find_breed(dam.breed)
        if profile is None:
            logger.error("breed_profile_missing", breed=dam.breed, name=name)

        genotype = calculate_foal_genotype(sire.genotype, dam.genotype, profile, rng,
                                           self.config.genetics)
        phenotype = determine_phenotype(genotype, profile, 0.0)
        ratings = calculate_foal_ratings(sire.ratings, dam.ratings, profile, rng,
                                         self.config.ratings)
        temperament = determine_foal_temperament(
            sire.temperament,
            dam.temperament,
            profile.temperament_weights if profile else None,
            rng,
            self.config.temperament,
        )
        traits = self._birth_traits(sire, dam, rng, mare_stress, feed_quality)

        foal = AnimalRecord(
            name=name,
            breed=dam.breed,
            age_days=0,
            sex='colt' if rng.random() < 0.5 else 'filly',
            sire_id=sire.animal_id,
            dam_id=dam.animal_id,
            genotype=genotype,
            phenotype=phenotype,
            ratings=ratings,
            temperament=temperament,
            traits=traits,
        )
        self.store.add_animal(foal)
        logger.info(
            "foal_created",
            animal_id=foal.animal_id,
            sire_id=sire_id,
            dam_id=dam_id,
            color=phenotype.display_color,
            temperament=temperament,
            traits=traits.to_dict(),
        )
        return foal

    def record_caregiving_task(self, animal_id: int, task_type: str, duration: int) -> InfluenceResult:
        """
        Apply one accepted caregiving task to an animal and log it.

        The read-modify-write of the animal's counters and traits runs inside
        a per-animal write transaction.

        Args:
            animal_id: Animal id
            task_type: Caregiving task identifier
            duration: Task duration in minutes

        Returns:
            InfluenceResult

        Raises:
            ValueError: If duration is negative
            RecordNotFoundError: If the animal does not exist
        """
        if duration < 0:
            raise ValueError(f"duration must be non-negative, got {duration}")

        with self.store.animal_transaction(animal_id) as txn:
            result = apply_caregiving_influence(
                txn.animal.age_days,
                task_type,
                txn.animal.influence_counters,
                txn.animal.traits,
                self.config.influence,
            )
            txn.animal.influence_counters = result.counters
            txn.animal.traits = result.traits
            txn.log_caregiving_task(task_type, duration, [f.to_dict() for f in result.newly_fixed])
        return result

    def log_activity(self, animal_id: int, activity: str) -> None:
        self.store.log_activity(animal_id, activity)

    def reveal_traits(self, animal_id: int) -> DiscoveryResult:
        """
        Run trait discovery for a stored animal and persist the outcome.

        Raises:
            RecordNotFoundError: If the animal does not exist
            IneligibleAnimalError: If the animal is too old for discovery
        """
        activities = self.store.get_activities(animal_id)
        with self.store.animal_transaction(animal_id) as txn:
            result = run_discovery(txn.animal, activities, self.config.discovery)
            txn.animal.traits = result.traits
            if result.event is not None:
                txn.record_discovery_event(result.event)
        return result

    def get_discovery_progress(self, animal_id: int) -> DiscoveryProgress:
        return get_discovery_progress(
            self.store.get_animal(animal_id),
            self.store.get_activities(animal_id),
            self.config.discovery,
        )

    def batch_reveal_traits(self, animal_ids: Sequence[int]) -> List[BatchDiscoveryOutcome]:
        """
        Run discovery for several stored animals, persisting each success.

        Args:
            animal_ids: Animal ids

        Returns:
            One outcome per id; unknown or ineligible animals carry an error
        """
        outcomes = []
        for animal_id in animal_ids:
            try:
                result = self.reveal_traits(animal_id)
                outcomes.append(BatchDiscoveryOutcome(animal_id=animal_id, result=result))
            except EquineGeneticsError as e:
                logger.error("batch_discovery_failed", animal_id=animal_id, error=str(e))
                outcomes.append(BatchDiscoveryOutcome(animal_id=animal_id, error=str(e)))
        return outcomes
