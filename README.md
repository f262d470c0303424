# oapistore

This package contains three pieces:

- An in-memory pet store. Use it as a library, or serve it as a small WSGI application.
- A bearer-token scope checker, plus an in-memory store of "things" meant to sit behind it.
- A configuration resolver for an OpenAPI code generator. It reads command-line flags and a YAML config file in either the current layout or the older flat one, and prints the resolved configuration.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## The pet store

```python
from oapistore.petstore import PetStore, NewPet, PetNotFoundError

store = PetStore()
pet = store.add_pet(NewPet.from_dict({"name": "Spot", "tag": "dog"}))
print(pet.to_dict())                    # {'id': 1000, 'name': 'Spot', 'tag': 'dog'}

print(store.find_pets(["dog"], None))   # filter by tags
print(store.find_pets(None, 10))        # stop once ten pets are collected

store.find_pet_by_id(pet.id)
store.delete_pet(pet.id)

try:
    store.find_pet_by_id(pet.id)
except PetNotFoundError as err:
    print(err)                          # Could not find pet with ID 1000
    print(err.error.to_dict())          # {'code': 404, 'message': '...'}
```

- Ids are handed out in order, starting at 1000.
- `Pet.to_dict` leaves `tag` out when it is unset.
- `Pet.from_dict` and `NewPet.from_dict` raise `ValueError` when a field has the wrong type. `NewPet` also requires `name`.
- When tags are given, `find_pets` adds a pet once for every tag it matches.
- All store operations hold a lock, so one `PetStore` can be shared between threads.

## Serving over HTTP

`oapistore.web.PetStoreApp` wraps a `PetStore` as a WSGI application. It serves these routes:

| Method | Path         | Success                | Notes                                               |
|--------|--------------|------------------------|-----------------------------------------------------|
| GET    | `/pets`      | 200, JSON list of pets | query parameters `tags` (repeatable) and `limit`    |
| POST   | `/pets`      | 201, the new pet       | body must be `application/json` holding a `NewPet`  |
| GET    | `/pets/{id}` | 200, the pet           | 404 with an error body if the pet is absent         |
| DELETE | `/pets/{id}` | 204, empty body        | 404 with an error body if the pet is absent         |

Error responses carry a JSON body with `code` and `message`:

- An id or `limit` that is not an integer, or is out of range, gives 400.
- A body that is malformed or has the wrong content type gives 400.
- An unknown path gives 404.
- An unsupported method gives 405.

```python
from wsgiref.simple_server import make_server
from oapistore.petstore import PetStore
from oapistore.web import PetStoreApp

make_server("0.0.0.0", 8080, PetStoreApp(PetStore())).serve_forever()
```

You can also start the server from the command line. It listens on all interfaces, on port 8080 by default:

```
oapistore-server --port 8080
```

## Bearer-token checks

`oapistore.auth` provides these functions:

- `get_jws_from_header(authorization)` returns the token from a value such as `"Bearer token"`.
- `get_claims_from_token(token)` reads the `perms` list from a mapping of token claims. A token without that claim yields `[]`.
- `check_token_claims(expected_claims, token)` raises unless every expected scope is among the token's claims.
- `authenticate(validator, security_scheme_name, authorization, scopes)` runs these steps in order:
  - checks that the scheme is `BearerAuth`;
  - extracts the token;
  - passes it to `validator.validate_jws(jws)`;
  - checks the scopes;
  - returns the validated claims.

Errors:

- A missing header raises `NoAuthHeaderError`.
- A header that does not start with `Bearer ` raises `InvalidAuthHeaderError`.
- Missing scopes raise `ClaimsInvalidError`.
- All three subclass `AuthError`. `authenticate` wraps each failure in an `AuthError` whose message says which step failed.

## The things store

`oapistore.things.ThingStore` keeps `Thing` records:

- `add_thing` hands out ids starting at 0 and returns a `ThingWithId`.
- `list_things` returns every entry as a `ThingWithId`, sorted by id.

## Generator configuration

`oapistore.config` holds the configuration model and its helpers. Invalid input raises `ConfigError`.

Configuration model:

- `Configuration`, with the nested `GenerateOptions`, `OutputOptions` and `CompatibilityOptions`.
- `OldConfiguration`, for the older flat layout.
- `from_dict(data, strict)` builds either class from parsed YAML. With `strict`, unknown keys raise.
- `Configuration.to_dict()` gives the YAML form, leaving out empty values.

Helpers:

- `parse_command_line_list` splits `"a, b,c"` into `["a", "b", "c"]`.
- `parse_command_line_map` parses `key:value,key:value`. Separators inside double quotes are not split on.
- `generation_targets(config, targets)` maps target names to generate options:
  - server names: `chi`, `echo`/`server`, `gin`, `gorilla`, `fiber`, `iris`, `strict-server`;
  - other code: `client`, `types`/`models`, `spec`;
  - output options: `skip-fmt` and `skip-prune`.
- `load_template_overrides(directory)` reads every file under a directory into a dict keyed by relative path.

`oapistore.settings` ties these together:

- `parse_flags` reads the command line.
- `detect_config_style` works out which layout a config file uses:
  - the explicit `-old-config-style` flag decides first;
  - next, a file that parses strictly in only one layout decides;
  - failing both, the presence of a deprecated flag means the old layout.
- `update_config_from_flags`, `update_old_config_from_flags` and `new_config_from_old_config` merge flags with the file.
- `resolve_configuration` does all of the above and fills in defaults.

With no config file, the defaults generate an echo server, a client, models and the embedded spec. When no package name is set, it is taken from the spec file name; `spec/pet-store.yaml` gives `petStore`. If an output file is set, `go list` is run first to try to read the package name from there.

```
oapistore-config -config cfg.yaml -output-config spec.yaml
```

Without `-output-config`, the command checks that the spec file is readable YAML. It then writes the resolved configuration as YAML to the `-o` file, or to stdout.

## What this package does not do

- `oapistore-config` does not generate code. It only resolves, validates and prints the configuration a generator would use. It does not build or check an OpenAPI document beyond confirming that the spec file is readable YAML.
- There is no token issuing or signature checking. `authenticate` relies on a validator object you supply.
- There is no HTTP server for the things store. `ThingStore` and the checks in `oapistore.auth` are library pieces only.
- `PetStoreApp` validates requests against its fixed pet routes only, not against an arbitrary OpenAPI document.