"""Template validation and field extraction interfaces.

Defines abstract base classes for checking a template container and for
discovering the data fields its placeholders reference.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a structural template check.

    Attributes:
        valid: Whether the container is usable as a template.
        errors: Human readable structural errors, empty when valid.
    """

    valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.valid and self.errors:
            raise ValueError("A valid result cannot carry errors")

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def failed(cls, *errors: str) -> "ValidationResult":
        return cls(valid=False, errors=tuple(errors))


class BaseTemplateValidator(ABC):
    """Abstract base class for template container validation."""

    @abstractmethod
    def validate(self, content: bytes) -> ValidationResult:
        """Check that content is a well-formed template container."""

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""


class BaseFieldExtractor(ABC):
    """Abstract base class for placeholder field extraction.

    Implementations return the distinct data-field names a template
    references, sorted lexicographically. Callers only rely on that
    contract, never on how the placeholders are recognised.
    """

    @abstractmethod
    def extract(self, content: bytes) -> list[str]:
        """Extract the sorted, distinct field names referenced by a template.

        Never raises: unreadable content yields an empty list.
        """

    @property
    @abstractmethod
    def supported_extensions(self) -> set[str]:
        """Return supported file extensions."""
