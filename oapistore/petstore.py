"""In-memory pet store: the data model and the operations behind the pet API."""

from __future__ import annotations

import threading
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any

FIRST_PET_ID = 1000


def _optional_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"field {key!r} must be a string")
    return value


def _require_mapping(data: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ValueError(f"{kind} must be a JSON object")
    return data


@dataclass
class Pet:
    """A pet held by the store."""

    id: int = 0
    name: str = ""
    tag: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form of the pet; ``tag`` is left out when unset."""
        result: dict[str, Any] = {"id": self.id, "name": self.name}
        if self.tag is not None:
            result["tag"] = self.tag
        return result

    @classmethod
    def from_dict(cls, data: Any) -> Pet:
        """Build a pet from its JSON form, raising ValueError on bad types."""
        data = _require_mapping(data, "Pet")
        pet_id = data.get("id", 0)
        if isinstance(pet_id, bool) or not isinstance(pet_id, int):
            raise ValueError("field 'id' must be an integer")
        name = data.get("name", "")
        if not isinstance(name, str):
            raise ValueError("field 'name' must be a string")
        return cls(id=pet_id, name=name, tag=_optional_str(data, "tag"))


@dataclass
class NewPet:
    """A pet to be added; it has no identifier yet."""

    name: str
    tag: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> NewPet:
        """Build a new pet from its JSON form, raising ValueError when invalid."""
        data = _require_mapping(data, "NewPet")
        name = data.get("name")
        if not isinstance(name, str):
            raise ValueError("field 'name' is required and must be a string")
        return cls(name=name, tag=_optional_str(data, "tag"))


@dataclass(frozen=True)
class ApiError:
    """The error body the API returns."""

    code: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class PetNotFoundError(LookupError):
    """Raised when no pet has the requested identifier."""

    def __init__(self, pet_id: int) -> None:
        self.pet_id = pet_id
        self.error = ApiError(
            code=HTTPStatus.NOT_FOUND.value,
            message=f"Could not find pet with ID {pet_id}",
        )
        super().__init__(self.error.message)


@dataclass
class PetStore:
    """A thread-safe collection of pets keyed by identifier."""

    pets: dict[int, Pet] = field(default_factory=dict)
    next_id: int = FIRST_PET_ID
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False, compare=False
    )

    def find_pets(
        self, tags: Iterable[str] | None = None, limit: int | None = None
    ) -> list[Pet]:
        """Return pets, filtered by tag when tags are given.

        A pet is added once for every given tag it matches. The limit is
        checked after each pet is looked at, so the scan stops as soon as
        the result holds at least ``limit`` pets.
        """
        wanted = list(tags) if tags is not None else None
        result: list[Pet] = []
        with self._lock:
            for pet in self.pets.values():
                if wanted is not None:
                    result.extend(
                        pet for t in wanted if pet.tag is not None and pet.tag == t
                    )
                else:
                    result.append(pet)
                if limit is not None and len(result) >= limit:
                    break
        return result

    def add_pet(self, new_pet: NewPet) -> Pet:
        """Store a new pet under the next free identifier and return it."""
        with self._lock:
            pet = Pet(id=self.next_id, name=new_pet.name, tag=new_pet.tag)
            self.next_id += 1
            self.pets[pet.id] = pet
        return pet

    def find_pet_by_id(self, pet_id: int) -> Pet:
        """Return the pet with the given identifier."""
        with self._lock:
            try:
                return self.pets[pet_id]
            except KeyError:
                raise PetNotFoundError(pet_id) from None

    def delete_pet(self, pet_id: int) -> None:
        """Remove the pet with the given identifier."""
        with self._lock:
            if pet_id not in self.pets:
                raise PetNotFoundError(pet_id)
            del self.pets[pet_id]