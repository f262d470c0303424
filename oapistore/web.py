"""WSGI front end for the pet store, with request checking against the pet API."""

from __future__ import annotations

import argparse
import json
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any
from urllib.parse import parse_qs
from wsgiref.simple_server import make_server

from oapistore.petstore import ApiError, NewPet, PetNotFoundError, PetStore

_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_PET_PATH = re.compile(r"^/pets/(?P<id>[^/]+)$")

StartResponse = Callable[..., Any]


class _HttpError(Exception):
    """An error that ends the request with the given status."""

    def __init__(self, status: HTTPStatus, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


@dataclass
class _Response:
    status: HTTPStatus
    payload: Any = None
    has_body: bool = True


def _parse_int(text: str, name: str, low: int, high: int) -> int:
    try:
        value = int(text, 10)
    except ValueError:
        raise _HttpError(
            HTTPStatus.BAD_REQUEST,
            f'parameter "{name}": value {text}: an invalid integer',
        ) from None
    if not low <= value <= high:
        raise _HttpError(
            HTTPStatus.BAD_REQUEST,
            f'parameter "{name}": value {text}: out of range',
        )
    return value


def _read_body(environ: dict[str, Any]) -> bytes:
    length_text = environ.get("CONTENT_LENGTH") or "0"
    try:
        length = int(length_text)
    except ValueError:
        raise _HttpError(HTTPStatus.BAD_REQUEST, "invalid Content-Length") from None
    if length <= 0:
        return b""
    return environ["wsgi.input"].read(length)


class PetStoreApp:
    """A WSGI application serving the pet API from a PetStore."""

    def __init__(self, store: PetStore | None = None) -> None:
        self.store = store if store is not None else PetStore()

    def __call__(
        self, environ: dict[str, Any], start_response: StartResponse
    ) -> Iterable[bytes]:
        try:
            response = self._dispatch(environ)
        except _HttpError as exc:
            response = _Response(
                exc.status, ApiError(code=exc.status.value, message=exc.message).to_dict()
            )
        status_line = f"{response.status.value} {response.status.phrase}"
        if not response.has_body:
            start_response(status_line, [("Content-Length", "0")])
            return [b""]
        body = (json.dumps(response.payload) + "\n").encode("utf-8")
        start_response(
            status_line,
            [
                ("Content-Type", "application/json; charset=UTF-8"),
                ("Content-Length", str(len(body))),
            ],
        )
        return [body]

    def _dispatch(self, environ: dict[str, Any]) -> _Response:
        method = environ.get("REQUEST_METHOD", "GET").upper()
        path = environ.get("PATH_INFO", "") or "/"
        query = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)

        if path == "/pets":
            if method == "GET":
                return self._find_pets(query)
            if method == "POST":
                return self._add_pet(environ)
            raise _HttpError(HTTPStatus.METHOD_NOT_ALLOWED, "method not allowed")

        match = _PET_PATH.match(path)
        if match is None:
            raise _HttpError(HTTPStatus.NOT_FOUND, "no matching operation was found")
        if method not in ("GET", "DELETE"):
            raise _HttpError(HTTPStatus.METHOD_NOT_ALLOWED, "method not allowed")
        pet_id = _parse_int(match.group("id"), "id", _INT64_MIN, _INT64_MAX)
        if method == "GET":
            return self._find_pet_by_id(pet_id)
        return self._delete_pet(pet_id)

    def _find_pets(self, query: dict[str, list[str]]) -> _Response:
        tags = query.get("tags")
        limit = None
        if "limit" in query:
            limit = _parse_int(query["limit"][0], "limit", _INT32_MIN, _INT32_MAX)
        pets = self.store.find_pets(tags=tags, limit=limit)
        return _Response(HTTPStatus.OK, [pet.to_dict() for pet in pets])

    def _add_pet(self, environ: dict[str, Any]) -> _Response:
        content_type = environ.get("CONTENT_TYPE", "")
        if not content_type.split(";")[0].strip().lower() == "application/json":
            raise _HttpError(
                HTTPStatus.BAD_REQUEST, "request body has an unexpected content type"
            )
        try:
            new_pet = NewPet.from_dict(json.loads(_read_body(environ) or b"null"))
        except (ValueError, UnicodeDecodeError):
            raise _HttpError(
                HTTPStatus.BAD_REQUEST, "Invalid format for NewPet"
            ) from None
        pet = self.store.add_pet(new_pet)
        return _Response(HTTPStatus.CREATED, pet.to_dict())

    def _find_pet_by_id(self, pet_id: int) -> _Response:
        try:
            pet = self.store.find_pet_by_id(pet_id)
        except PetNotFoundError as exc:
            return _Response(HTTPStatus.NOT_FOUND, exc.error.to_dict())
        return _Response(HTTPStatus.OK, pet.to_dict())

    def _delete_pet(self, pet_id: int) -> _Response:
        try:
            self.store.delete_pet(pet_id)
        except PetNotFoundError as exc:
            return _Response(HTTPStatus.NOT_FOUND, exc.error.to_dict())
        return _Response(HTTPStatus.NO_CONTENT, has_body=False)


def main(argv: list[str] | None = None) -> None:
    """Serve the pet store over HTTP until interrupted."""
    parser = argparse.ArgumentParser(description="Pet store HTTP server")
    parser.add_argument(
        "-port", "--port", type=int, default=8080, help="Port for test HTTP server"
    )
    args = parser.parse_args(argv)
    app = PetStoreApp(PetStore())
    with make_server("0.0.0.0", args.port, app) as server:
        server.serve_forever()


if __name__ == "__main__":
    main()