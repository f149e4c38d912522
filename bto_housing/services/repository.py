# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Repository contract and the in-memory store used by default and in tests.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Generic, List, Optional, Type, TypeVar

from pydantic import BaseModel

from ..models.entities import Project, Application, Enquiry, OfficerRegistration

logger = logging.getLogger(__name__)

T = TypeVar('T', bound=BaseModel)


class Repository(ABC, Generic[T]):
    """Record store for one entity type."""

    def __init__(self, model_cls: Type[T], key_field: str):
        self.model_cls = model_cls
        self.key_field = key_field

    def key_of(self, entity: T) -> str:
        """Get the identifier of an entity."""
        return getattr(entity, self.key_field)

    @abstractmethod
    def get_all(self) -> List[T]:
        """Load every record."""

    @abstractmethod
    def find_by_id(self, entity_id: str) -> Optional[T]:
        """Load one record, None when it does not exist."""

    @abstractmethod
    def save(self, entity: T) -> T:
        """Create or update a record. Raises SystemException on storage failure."""

    @abstractmethod
    def delete(self, entity_id: str) -> bool:
        """Remove a record, returning whether it existed."""

    def exists(self, entity_id: str) -> bool:
        return self.find_by_id(entity_id) is not None


class InMemoryRepository(Repository[T]):
    """Dict-backed repository. Callers always receive copies of stored records."""

    def __init__(self, model_cls: Type[T], key_field: str):
        super().__init__(model_cls, key_field)
        self._records: Dict[str, T] = {}

    def get_all(self) -> List[T]:
        return [record.model_copy(deep=True) for record in self._records.values()]

    def find_by_id(self, entity_id: str) -> Optional[T]:
        record = self._records.get(entity_id)
        if record is None:
            logger.debug(f"{self.model_cls.__name__} {entity_id} not found")
            return None
        return record.model_copy(deep=True)

    def save(self, entity: T) -> T:
        self._records[self.key_of(entity)] = entity.model_copy(deep=True)
        logger.debug(f"Saved {self.model_cls.__name__} {self.key_of(entity)}")
        return entity

    def delete(self, entity_id: str) -> bool:
        return self._records.pop(entity_id, None) is not None

    def __len__(self) -> int:
        return len(self._records)


@dataclass
class HousingStores:
    """Explicit bundle of the stores every controller is constructed with."""

    projects: Repository[Project]
    applications: Repository[Application]
    enquiries: Repository[Enquiry]
    registrations: Repository[OfficerRegistration]

    @classmethod
    def in_memory(cls) -> "HousingStores":
        """Fresh, empty in-memory stores."""
        return cls(
            projects=InMemoryRepository(Project, "name"),
            applications=InMemoryRepository(Application, "id"),
            enquiries=InMemoryRepository(Enquiry, "id"),
            registrations=InMemoryRepository(OfficerRegistration, "id")
        )

    @classmethod
    def from_mongodb(cls, service) -> "HousingStores":
        """Stores backed by one MongoDB collection per entity type."""
        from .mongodb import MongoRepository

        return cls(
            projects=MongoRepository(service, "projects", Project, "name"),
            applications=MongoRepository(service, "applications", Application, "id"),
            enquiries=MongoRepository(service, "enquiries", Enquiry, "id"),
            registrations=MongoRepository(service, "registrations", OfficerRegistration, "id")
        )
