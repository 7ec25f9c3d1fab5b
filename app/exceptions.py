class PortfolioServiceError(Exception):
    """Base class for errors raised by the portfolio services."""


class NotFoundError(PortfolioServiceError):
    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} not found")


class DuplicateError(PortfolioServiceError):
    """A unique field (e.g. username) is already taken."""


class StoreError(PortfolioServiceError):
    """The database could not complete a read or write."""
