"""Protocol for the local stores under .gantt/."""

from typing import Protocol, TypeVar

T = TypeVar("T")


class StoreProtocol(Protocol[T]):
    """Interface of a local document store.

    Each store owns one document (the task list, the sync state, the comment
    cache) and reads or replaces it as a whole.
    """

    def exists(self) -> bool:
        """Whether the document has been written."""
        ...

    def read(self) -> T:
        """Load the document.

        Raises:
            StoreNotFoundError: If the document does not exist (stores with a
                natural empty value return it instead).
            StoreError: If the document cannot be parsed.
        """
        ...

    def write(self, value: T) -> None:
        """Replace the document atomically."""
        ...
