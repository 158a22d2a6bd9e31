"""Exceptions raised by the design validation core."""


class PodshopError(Exception):
    """Base class for all domain errors."""


class InvalidAssetError(PodshopError):
    """Uploaded design payload is empty, undecodable or not a usable image."""


class PersistenceError(PodshopError):
    """Storage layer failure. Callers may retry with backoff."""


class DuplicateContentError(PersistenceError):
    """Another live design already owns this content fingerprint."""

    def __init__(self, content_hash):
        super().__init__(f"Design with content hash {content_hash[:12]}... already exists")
        self.content_hash = content_hash


class NotFoundError(PodshopError):
    def __init__(self, entity, entity_id):
        super().__init__(f"{entity} {entity_id} not found")
        self.entity = entity
        self.entity_id = entity_id


class IllegalStateTransitionError(PodshopError):
    """A transition outside the state machine, or one whose guard failed."""

    def __init__(self, entity, entity_id, from_state, event, detail=None):
        from_value = getattr(from_state, "value", from_state)
        event_value = getattr(event, "value", event)
        message = (
            f"Illegal {entity} transition: {from_value} --{event_value}--> "
            f"({entity} {entity_id})"
        )
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id
        self.from_state = from_value
        self.event = event_value
        self.detail = detail
