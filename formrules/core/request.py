"""
FormRules Request Input
=======================

Input sources for form requests.

A form request only needs one thing from the HTTP layer: every input
value as a flat mapping (``all()``). ``Request`` provides that from
query parameters, form fields and a JSON body, merged in that order
(later sources win on key clashes). ``Request.from_asgi`` builds one
straight from an ASGI scope.

Example:
    request = Request(query={"page": "2"}, form={"name": "John"})
    request.all()   # {"page": "2", "name": "John"}
"""

from __future__ import annotations

from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    Optional,
    Protocol,
    runtime_checkable,
)
from urllib.parse import parse_qs

import orjson

Receive = Callable[[], Awaitable[Dict[str, Any]]]


@runtime_checkable
class InputSource(Protocol):
    """Anything that can hand over raw input values."""

    def all(self) -> Mapping[str, Any]:
        ...


def _unwrap(values: Mapping[str, List[str]]) -> Dict[str, Any]:
    """Single-item lists become plain values (?a=1 → "1", ?a=1&a=2 → [..])."""
    return {key: items[0] if len(items) == 1 else list(items) for key, items in values.items()}


class Request:
    """
    Request input container.

    Args:
        query: Query string parameters
        form: Form fields
        json: Decoded JSON body (only mappings contribute to ``all()``)
        method: HTTP method
        path: Request path
    """

    __slots__ = ("query", "form", "json", "method", "path", "_all")

    def __init__(
        self,
        query: Optional[Mapping[str, Any]] = None,
        form: Optional[Mapping[str, Any]] = None,
        json: Any = None,
        method: str = "GET",
        path: str = "/",
    ) -> None:
        self.query: Dict[str, Any] = dict(query or {})
        self.form: Dict[str, Any] = dict(form or {})
        self.json = json
        self.method = method.upper()
        self.path = path
        self._all: Optional[Dict[str, Any]] = None

    @classmethod
    async def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> "Request":
        """
        Build a request from an ASGI HTTP scope, reading the body.

        JSON bodies are decoded with orjson; urlencoded bodies with
        parse_qs. Other content types contribute no body input.
        """
        query_string = scope.get("query_string", b"")
        if isinstance(query_string, bytes):
            query_string = query_string.decode("latin-1")
        query = _unwrap(parse_qs(query_string, keep_blank_values=True))

        content_type = ""
        for name, value in scope.get("headers", []):
            if name.lower() == b"content-type":
                content_type = value.decode("latin-1").lower()
                break

        body = await _read_body(receive)
        form: Dict[str, Any] = {}
        json_body: Any = None

        if body and "application/json" in content_type:
            json_body = orjson.loads(body)
        elif body and "application/x-www-form-urlencoded" in content_type:
            form = _unwrap(parse_qs(body.decode("utf-8"), keep_blank_values=True))

        return cls(
            query=query,
            form=form,
            json=json_body,
            method=scope.get("method", "GET"),
            path=scope.get("path", "/"),
        )

    def all(self) -> Dict[str, Any]:
        """All input values: query, then form, then JSON object body."""
        if self._all is None:
            merged: Dict[str, Any] = dict(self.query)
            merged.update(self.form)
            if isinstance(self.json, Mapping):
                merged.update(self.json)
            self._all = merged
        return dict(self._all)

    def input(self, key: str, default: Any = None) -> Any:
        return self.all().get(key, default)

    def has(self, key: str) -> bool:
        return key in self.all()

    def only(self, keys: Iterable[str]) -> Dict[str, Any]:
        data = self.all()
        return {key: data[key] for key in keys if key in data}

    def __repr__(self) -> str:
        return f"<Request {self.method} {self.path}>"


async def _read_body(receive: Receive) -> bytes:
    chunks: List[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.request":
            chunk = message.get("body", b"")
            if chunk:
                chunks.append(chunk)
            if not message.get("more_body", False):
                break
        elif message["type"] == "http.disconnect":
            raise RuntimeError("Client disconnected")
    return b"".join(chunks)
