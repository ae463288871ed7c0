import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from opentelemetry import trace

from prerender.pipeline.errors import CacheStoreFailure, RenderFailure, RenderTimeout
from prerender.pipeline.models import CachedResponse, RequestContext
from prerender.utils.exception_logging import log_exception_with_details
from prerender.utils.traced_requests import traced_request

router = APIRouter()
tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")


def request_path_query(request: Request) -> str:
    """The path and query exactly as the client sent them."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        path = raw_path.split(b"?", 1)[0].decode("latin-1")
    else:
        path = request.url.path
    query = request.scope.get("query_string", b"").decode("latin-1")
    return f"{path}?{query}" if query else path


def request_context(request: Request) -> RequestContext:
    return RequestContext(
        method=request.method,
        path_query=request_path_query(request),
        headers=tuple(request.headers.items()),
        client_host=request.client.host if request.client else None,
    )


def to_http_response(result: CachedResponse) -> Response:
    response = Response(content=result.body, status_code=result.status_code)
    for name, value in result.headers:
        # Content-Length is computed from the body actually sent
        if name.lower() == "content-length":
            continue
        response.headers.append(name, value)
    return response


@router.get("/healthz", include_in_schema=False)
async def healthz():
    return {"status": "ok"}


async def prerender(request: Request):
    """
    Catch-all endpoint that serves prerendered pages.

    Registered without a method list so every verb, including ones Starlette
    does not know, reaches the pipeline and gets its empty 405.
    """
    context = request_context(request)
    orchestrator = request.app.state.orchestrator

    with traced_request(
        tracer,
        operation="prerender",
        method=context.method,
        path_query=context.path_query,
        client_host=context.client_host,
        start_message=f"[Prerender] {context.method} {context.path_query}",
    ) as span:
        try:
            result = await orchestrator.handle(context)
        except RenderTimeout as e:
            log_exception_with_details(logger, "[Prerender] Render timed out.", e)
            span.record_exception(e)
            raise HTTPException(status_code=504, detail="Render timed out")
        except RenderFailure as e:
            log_exception_with_details(logger, "[Prerender] Render failed.", e)
            span.record_exception(e)
            raise HTTPException(status_code=502, detail="Render failed")
        except CacheStoreFailure as e:
            log_exception_with_details(
                logger, f"[Prerender] Cache {e.operation} failed.", e
            )
            span.record_exception(e)
            raise HTTPException(status_code=503, detail="Cache unavailable")
        except Exception as e:
            log_exception_with_details(logger, "[Prerender]", e)
            span.record_exception(e)
            raise HTTPException(status_code=500, detail="Internal server error")

        span.set_attribute("http.status_code", result.status_code)
        return to_http_response(result)


router.add_route("/{path:path}", prerender, include_in_schema=False)
