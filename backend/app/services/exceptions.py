"""Domain errors raised by the entity services."""


class EntityNotFoundError(LookupError):
    """No row exists for the requested id."""

    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")
