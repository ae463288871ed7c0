import hashlib
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple, Union

from prerender import vars as env
from prerender.pipeline.rewrite import load_resolver

RenderTarget = Union[str, Callable]


def _fixed_length_digest(name: str) -> str:
    """Lowercased digest name, or ValueError if hexdigest() would need a length."""
    normalized = name.strip().lower()
    try:
        digest_size = hashlib.new(normalized).digest_size
    except (ValueError, TypeError) as e:
        raise ValueError(f"Unknown cache key digest algorithm: {name}") from e
    # shake_128 and shake_256 report 0
    if digest_size == 0:
        raise ValueError(
            f"Cache key digest must have a fixed length, got variable-length {name}"
        )
    return normalized


@dataclass(frozen=True)
class ProxyConfig:
    """
    Immutable settings for the prerender pipeline.

    render_target is either a URL prefix or a resolver callable taking
    (path_query, RequestContext). Header allowlists keep their configured order.
    """

    render_target: RenderTarget
    default_ttl: int = 3600
    request_headers: Tuple[str, ...] = env.DEFAULT_REQUEST_HEADERS
    response_headers: Tuple[str, ...] = env.DEFAULT_RESPONSE_HEADERS
    cache_key_digest: Optional[str] = None
    renderer_id: str = "prerender"

    def __post_init__(self):
        if isinstance(self.render_target, str):
            if not self.render_target:
                raise ValueError("render_target must not be empty")
        elif not callable(self.render_target):
            raise TypeError(
                "render_target must be a URL prefix or a callable, "
                f"got {type(self.render_target).__name__}"
            )
        # bool is an int subclass but never a valid TTL
        if (
            not isinstance(self.default_ttl, int)
            or isinstance(self.default_ttl, bool)
            or self.default_ttl <= 0
        ):
            raise ValueError(
                f"default_ttl must be a positive integer, got {self.default_ttl!r}"
            )
        if self.cache_key_digest is not None:
            object.__setattr__(
                self, "cache_key_digest", _fixed_length_digest(self.cache_key_digest)
            )
        object.__setattr__(self, "request_headers", tuple(self.request_headers))
        object.__setattr__(self, "response_headers", tuple(self.response_headers))


def parse_render_target(value: str) -> RenderTarget:
    """A value with a scheme is a URL prefix, anything else an import path."""
    if "://" in value:
        return value
    return load_resolver(value)


def load_proxy_config(
    rewrite: Optional[str] = None,
    default_ttl: Optional[int] = None,
    request_headers: Optional[Sequence[str]] = None,
    response_headers: Optional[Sequence[str]] = None,
    cache_key_digest: Optional[str] = None,
    renderer_id: Optional[str] = None,
) -> ProxyConfig:
    """Build a ProxyConfig from explicit values, falling back to the environment."""
    rewrite = rewrite if rewrite is not None else env.PRERENDER_REWRITE
    if not rewrite:
        raise ValueError("PRERENDER_REWRITE is not configured")
    digest = cache_key_digest if cache_key_digest is not None else env.PRERENDER_CACHE_KEY_DIGEST
    return ProxyConfig(
        render_target=parse_render_target(rewrite),
        default_ttl=default_ttl if default_ttl is not None else env.PRERENDER_DEFAULT_TTL,
        request_headers=tuple(
            request_headers
            if request_headers is not None
            else env.PRERENDER_REQUEST_HEADERS
        ),
        response_headers=tuple(
            response_headers
            if response_headers is not None
            else env.PRERENDER_RESPONSE_HEADERS
        ),
        cache_key_digest=digest or None,
        renderer_id=renderer_id or env.PRERENDER_RENDERER_ID,
    )
