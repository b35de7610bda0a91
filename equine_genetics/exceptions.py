"""Custom exceptions for the equine_genetics package."""


class EquineGeneticsError(Exception):
    """Base exception for equine_genetics package."""
    pass


class ConfigurationError(EquineGeneticsError):
    """Configuration validation or loading error."""
    pass


class MissingParentDataError(EquineGeneticsError):
    """Required parent data (genotype) is missing, so a foal cannot be created."""
    pass


class IneligibleAnimalError(EquineGeneticsError):
    """Operation requested for an animal outside its eligibility window."""
    pass


class RecordNotFoundError(EquineGeneticsError):
    """Requested animal or breed record does not exist."""
    pass


class DatabaseError(EquineGeneticsError):
    """Database operation error."""
    pass
