"""
Rewrite resolution: turns an inbound path+query into the URL to render.

A static prefix is concatenated with the path+query verbatim. A resolver
callable can instead validate the request and return a ShortCircuit response
or reject it before any cache or render work happens.
"""

import importlib
import inspect
import logging
import re
from typing import Callable, Iterable, Optional, Union

from prerender.pipeline.errors import ResolverConfigError
from prerender.pipeline.headers import get_header
from prerender.pipeline.models import (
    Rejected,
    RenderURL,
    RequestContext,
    ResolvedTarget,
    ShortCircuit,
)

logger = logging.getLogger("uvicorn.error")

# User agents of the crawlers that commonly need prerendered pages
DEFAULT_CRAWLER_AGENTS = (
    "googlebot",
    "bingbot",
    "yandex",
    "baiduspider",
    "duckduckbot",
    "slurp",
    "facebookexternalhit",
    "twitterbot",
    "linkedinbot",
    "applebot",
)


class RewriteResolver:
    def __init__(self, render_target: Union[str, Callable]):
        self.render_target = render_target

    async def resolve(self, path_query: str, context: RequestContext) -> ResolvedTarget:
        if isinstance(self.render_target, str):
            return RenderURL(self.render_target + path_query)

        result = self.render_target(path_query, context)
        if inspect.isawaitable(result):
            result = await result

        if result is None:
            return Rejected()
        if isinstance(result, (RenderURL, ShortCircuit, Rejected)):
            return result
        raise TypeError(
            "Rewrite resolver must return RenderURL, ShortCircuit, Rejected or None, "
            f"got {type(result).__name__}"
        )


def load_resolver(path: str) -> Callable:
    """Import a resolver given as "package.module:callable"."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ResolverConfigError(
            f"Resolver must be given as 'module:callable', got {path!r}"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ResolverConfigError(f"Cannot import resolver module {module_name}: {e}")

    resolver = module
    for part in attr.split("."):
        resolver = getattr(resolver, part, None)
        if resolver is None:
            raise ResolverConfigError(f"{module_name} has no attribute {attr}")
    if not callable(resolver):
        raise ResolverConfigError(f"Resolver {path} is not callable")
    logger.info(f"[Rewrite] Using resolver {path}")
    return resolver


def crawler_only(
    prefix: str,
    agents: Iterable[str] = DEFAULT_CRAWLER_AGENTS,
    deny_status: int = 403,
) -> Callable[[str, RequestContext], ResolvedTarget]:
    """
    Build a resolver that only prerenders for known crawlers.

    Other user agents get a short-circuit response with deny_status and an
    empty body; a request without a User-Agent is rejected.
    """
    pattern = re.compile("|".join(re.escape(a) for a in agents), re.IGNORECASE)

    def resolve(path_query: str, context: RequestContext) -> Optional[ResolvedTarget]:
        agent = get_header(context.headers, "User-Agent")
        if not agent:
            return Rejected("missing user agent")
        if not pattern.search(agent):
            return ShortCircuit(deny_status)
        return RenderURL(prefix + path_query)

    return resolve
