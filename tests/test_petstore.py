import json

import pytest

from oapistore.petstore import ApiError, NewPet, Pet, PetNotFoundError, PetStore


@pytest.fixture
def store():
    return PetStore()


def test_add_pet(store):
    new_pet = NewPet(name="Spot", tag="TagOfSpot")
    result = store.add_pet(new_pet)
    assert result.name == new_pet.name
    assert result.tag == new_pet.tag
    assert store.pets[result.id] == result


def test_add_pet_assigns_increasing_ids_from_1000(store):
    first = store.add_pet(NewPet(name="Spot"))
    second = store.add_pet(NewPet(name="Fido"))
    assert first.id == 1000
    assert second.id == 1001
    assert store.next_id == 1002


def test_find_pet_by_id(store):
    pet = Pet(id=100)
    store.pets[pet.id] = pet
    assert store.find_pet_by_id(100) == pet


def test_pet_not_found(store):
    with pytest.raises(PetNotFoundError) as info:
        store.find_pet_by_id(27179095781)
    assert info.value.error.code == 404
    assert info.value.error.message == "Could not find pet with ID 27179095781"


def test_list_all_pets(store):
    store.pets = {1: Pet(), 2: Pet()}
    assert len(store.find_pets()) == 2


def test_filter_pets_by_tag(store):
    store.pets = {1: Pet(tag="TagOfFido"), 2: Pet()}
    result = store.find_pets(tags=["TagOfFido"])
    assert len(result) == 1
    assert result[0].tag == "TagOfFido"


def test_filter_pets_by_missing_tag(store):
    store.pets = {1: Pet(), 2: Pet()}
    assert store.find_pets(tags=["NotExists"]) == []


def test_find_pets_respects_limit(store):
    store.pets = {1: Pet(id=1), 2: Pet(id=2), 3: Pet(id=3)}
    assert len(store.find_pets(limit=2)) == 2


def test_find_pets_repeated_tag_matches_twice(store):
    store.pets = {1: Pet(id=1, tag="a")}
    assert len(store.find_pets(tags=["a", "a"])) == 2


def test_delete_pets(store):
    store.pets = {1: Pet(), 2: Pet()}
    with pytest.raises(PetNotFoundError) as info:
        store.delete_pet(7)
    assert info.value.error.code == 404
    store.delete_pet(1)
    store.delete_pet(2)
    assert store.find_pets() == []


def test_pet_round_trip_through_json():
    pet = Pet(id=5, name="testpet", tag="cat")
    encoded = json.dumps(pet.to_dict())
    assert Pet.from_dict(json.loads(encoded)) == pet


def test_pet_to_dict_omits_missing_tag():
    assert Pet(id=1, name="Spot").to_dict() == {"id": 1, "name": "Spot"}


def test_pet_from_dict_defaults():
    assert Pet.from_dict({"id": 100}) == Pet(id=100, name="", tag=None)


@pytest.mark.parametrize(
    "data",
    [[1, 2], {"id": "one"}, {"id": True}, {"name": 7}, {"tag": 3}],
)
def test_pet_from_dict_rejects_bad_input(data):
    with pytest.raises(ValueError):
        Pet.from_dict(data)


def test_new_pet_from_dict():
    assert NewPet.from_dict({"name": "Spot", "tag": "TagOfSpot"}) == NewPet(
        name="Spot", tag="TagOfSpot"
    )


@pytest.mark.parametrize("data", ["Spot", {}, {"name": 7}, {"name": "x", "tag": 1}])
def test_new_pet_from_dict_rejects_bad_input(data):
    with pytest.raises(ValueError):
        NewPet.from_dict(data)


def test_api_error_to_dict():
    error = ApiError(code=404, message="Could not find pet with ID 7")
    assert error.to_dict() == {"code": 404, "message": "Could not find pet with ID 7"}


def test_not_found_error_is_lookup_error(store):
    with pytest.raises(LookupError) as info:
        store.delete_pet(3)
    assert str(info.value) == "Could not find pet with ID 3"