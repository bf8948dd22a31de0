"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional


class Database(ABC):
    """Abstract key/value persistence tier for protracker.

    Implementations may raise on I/O failure; callers that must not fail wrap
    these calls (see ``protracker.domain.entity_store``).
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    @abstractmethod
    def get_value(self, key: str) -> Optional[str]:
        """Get the raw serialized value stored under key, or None."""
        pass

    @abstractmethod
    def set_value(self, key: str, value: str) -> None:
        """Store a raw serialized value under key, replacing any previous one."""
        pass

    @abstractmethod
    def delete_value(self, key: str) -> bool:
        """Delete key. Returns True if a value was removed."""
        pass

    @abstractmethod
    def list_keys(self, prefix: str = "") -> list[str]:
        """List stored keys starting with prefix."""
        pass
