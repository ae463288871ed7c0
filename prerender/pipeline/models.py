from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

HeaderPairs = Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class RequestContext:
    """Framework-independent view of an inbound request."""

    method: str
    path_query: str
    headers: HeaderPairs = ()
    client_host: Optional[str] = None


@dataclass(frozen=True)
class RenderURL:
    url: str


@dataclass(frozen=True)
class ShortCircuit:
    status_code: int
    headers: HeaderPairs = ()
    body: bytes = b""


@dataclass(frozen=True)
class Rejected:
    reason: Optional[str] = None


ResolvedTarget = Union[RenderURL, ShortCircuit, Rejected]


@dataclass(frozen=True)
class RenderRequest:
    url: str
    headers: HeaderPairs = ()


@dataclass(frozen=True)
class RenderResult:
    """What a renderer hands back: status, ordered headers and the document."""

    status_code: int
    headers: HeaderPairs = ()
    body: str = ""


@dataclass(frozen=True)
class CachedResponse:
    """
    The unit stored in the cache store and returned to the client.

    Headers are kept as an ordered tuple of pairs so the exact value stored is
    the exact value served on a hit.
    """

    status_code: int
    headers: HeaderPairs = field(default_factory=tuple)
    body: bytes = b""

    @classmethod
    def empty(cls, status_code: int) -> "CachedResponse":
        return cls(status_code=status_code, headers=(), body=b"")

    @classmethod
    def from_short_circuit(cls, target: ShortCircuit) -> "CachedResponse":
        return cls(
            status_code=target.status_code,
            headers=tuple(target.headers),
            body=target.body,
        )
