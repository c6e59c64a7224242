"""
Service Exceptions

Errors surfaced to callers of the stats and ranking layers.
"""


class RankingServiceError(Exception):
    """Base class for all service errors."""
    pass


class NotFound(RankingServiceError):
    """Raised when a referenced entity does not exist."""

    def __init__(self, entity: str, entity_id: str):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found: {entity_id}")


class RankedSetBuildError(RankingServiceError):
    """Raised when one ranked set fails to build or swap."""

    def __init__(self, set_name: str, cause: Exception):
        self.set_name = set_name
        self.cause = cause
        super().__init__(f"Failed to rebuild ranked set '{set_name}': {cause}")


class GenerationConflict(RankingServiceError):
    """Raised when a ranked set's live generation moved while a rebuild was swapping it in."""

    def __init__(self, set_name: str, expected_generation: int):
        self.set_name = set_name
        self.expected_generation = expected_generation
        super().__init__(
            f"Ranked set '{set_name}' is no longer at generation {expected_generation}"
        )
