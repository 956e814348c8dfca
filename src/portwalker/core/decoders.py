"""Decoders for the plain-text ``<prefix><value>`` bodies the service returns."""

import re
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import ParseError
from .models import USER_LEVEL_PREFIX, USER_SECRET_PREFIX

T = TypeVar("T")

_INTEGER = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Decoded(Generic[T]):
    value: T | None = None
    error: ParseError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def _strip(body: str, prefix: str) -> str:
    if body.startswith(prefix):
        body = body[len(prefix):]
    return body.strip()


def decode_secret(body: str) -> Decoded[str]:
    value = _strip(body, USER_SECRET_PREFIX)
    if not value:
        return Decoded(error=ParseError("empty user secret", body))
    return Decoded(value)


def decode_level(body: str) -> Decoded[int]:
    raw = _strip(body, USER_LEVEL_PREFIX)
    if not _INTEGER.fullmatch(raw):
        return Decoded(error=ParseError(f"user level {raw!r} is not an integer", body))
    return Decoded(int(raw))
