from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Self


class UnitOfWork(ABC):
    """
    One use-case's transaction, used as a context manager.

    Concrete classes hang the domain repositories off the instance, all
    sharing a session, and decide on exit whether to commit.
    """

    @abstractmethod
    def __enter__(self) -> Self: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...
