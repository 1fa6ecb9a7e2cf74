"""FastAPI application for the HR Portal access service.

Endpoints (also mounted under ``/api/v1``):
  GET    /health                    - Health check
  GET    /api/version               - API version info
  GET    /access/roles              - Canonical roles with display names
  GET    /access/roles/{role}       - Access record of a single role
  GET    /access/matrix             - Full role access table (System Admin or assignRoles)
  POST   /access/combined           - Combined access for a role list
  POST   /access/check-route        - Can a role list reach a route
  POST   /access/check-feature      - Does a role list have a feature
  POST   /access/default-route      - Landing page for a role list
  GET    /access/me                 - Combined access of the caller's session
  POST   /access/guard              - Evaluate the route guard for the caller
  GET    /navigation                - Sidebar items visible to the caller
  *      /backend/{path}            - Pass-through to the HR backend REST API
"""

from __future__ import annotations

import logging
import os
import time
import warnings
from contextlib import asynccontextmanager
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

# Suppress slowapi's use of deprecated asyncio.iscoroutinefunction
warnings.filterwarnings(
    "ignore",
    message=r".*asyncio\.iscoroutinefunction.*",
    category=DeprecationWarning,
    module=r"slowapi\..*",
)
from slowapi import Limiter  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from slowapi.util import get_remote_address  # noqa: E402

import hrportal  # noqa: E402
from hrportal.access.guard import GuardRequirements, RouteGuard  # noqa: E402
from hrportal.access.resolver import AccessResolver  # noqa: E402
from hrportal.access.table import default_access_table, load_access_table  # noqa: E402
from hrportal.api.proxy import RETURNED_HEADERS, BackendProxy  # noqa: E402
from hrportal.auth import require_access, require_session, session_from_request  # noqa: E402
from hrportal.auth_providers.base import AuthResult  # noqa: E402
from hrportal.config import settings  # noqa: E402
from hrportal.exceptions import AccessDeniedError, HRPortalError  # noqa: E402
from hrportal.logging_config import log_startup_info, setup_logging  # noqa: E402
from hrportal.navigation import control_path, is_active, visible_nav_items  # noqa: E402
from hrportal.rbac import (  # noqa: E402
    FALLBACK_ROLE,
    ROLE_PRIORITY,
    SystemRole,
    parse_role,
    role_display_name,
)

logger = logging.getLogger("hrportal")
_audit_logger = logging.getLogger("hrportal.audit")

_API_VERSION = "1.0.0"
_API_PREFIX = "/api/v1"

# ---------------------------------------------------------------------------
# Rate limiter
# ---------------------------------------------------------------------------
_rate_limit_enabled = settings.rate_limit.lower() != "none"
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit] if _rate_limit_enabled else [],
    enabled=_rate_limit_enabled,
)

_STARTUP_TIME: float = 0.0


def _create_resolver() -> AccessResolver:
    """Build the resolver from HR_ACCESS_TABLE_PATH, or the built-in table.

    Checks os.environ directly as well (for tests that set the variable
    after the settings singleton is created).
    """
    path = os.environ.get("HR_ACCESS_TABLE_PATH", settings.access_table_path)
    if path:
        logger.info("Loading access table from %s", path)
        return AccessResolver(load_access_table(path))
    return AccessResolver(default_access_table())


# ---------------------------------------------------------------------------
# Request/Response schemas
# ---------------------------------------------------------------------------


class RolesRequest(BaseModel):
    roles: list[str] | None = Field(default=None, max_length=64)


class RouteCheckRequest(RolesRequest):
    route: str = Field(min_length=1, max_length=2048)


class FeatureCheckRequest(RolesRequest):
    feature: str = Field(min_length=1, max_length=256)


class GuardRequest(BaseModel):
    path: str = Field(min_length=1, max_length=2048, description="Current page path")
    required_route: str | None = Field(default=None, max_length=2048)
    required_roles: list[str] = Field(default_factory=list, max_length=64)
    required_features: list[str] = Field(default_factory=list, max_length=64)
    redirect_to: str | None = Field(default=None, max_length=2048)


# ---------------------------------------------------------------------------
# App lifecycle
# ---------------------------------------------------------------------------

_resolver = _create_resolver()
_guard = RouteGuard(_resolver, login_route=settings.login_route)
_backend = BackendProxy(settings.backend_url, timeout=settings.backend_timeout)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global _STARTUP_TIME
    _STARTUP_TIME = time.monotonic()
    setup_logging()
    log_startup_info(role_count=len(app.state.resolver.table))
    yield
    logger.info("Closing backend client")
    await app.state.backend.close()
    logger.info("Shutdown complete")


_OPENAPI_TAGS = [
    {"name": "Health", "description": "Health checks and version info"},
    {"name": "Access", "description": "Role access resolution and route guard"},
    {"name": "Navigation", "description": "Role-filtered sidebar navigation"},
    {"name": "Backend", "description": "Pass-through to the HR backend REST API"},
]

app = FastAPI(
    title="HR Portal Access Service",
    description=(
        "Role-based navigation access for the HR Management System portal "
        "(recruitment, onboarding, offboarding) and a thin proxy to its backend."
    ),
    version=hrportal.__version__,
    lifespan=lifespan,
    dependencies=[Depends(require_session)],
    openapi_tags=_OPENAPI_TAGS,
)

app.state.limiter = limiter
app.state.resolver = _resolver
app.state.guard = _guard
app.state.backend = _backend


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------
@app.exception_handler(HRPortalError)
async def hrportal_error_handler(request: Request, exc: HRPortalError) -> JSONResponse:
    """Centralized handler for HR Portal exceptions."""
    request_id = getattr(request.state, "request_id", "unknown")
    content: dict[str, Any] = {
        "error": exc.error_type,
        "message": exc.message,
        "request_id": request_id,
    }
    if isinstance(exc, AccessDeniedError) and exc.redirect_to:
        content["redirect_to"] = exc.redirect_to
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return 429 with Retry-After header on rate limit."""
    request_id = getattr(request.state, "request_id", "unknown")
    _audit_logger.warning(
        "Rate limit exceeded: %s %s from %s",
        request.method,
        request.url.path,
        get_remote_address(request),
        extra={"event_category": "audit", "action": "rate_limit_exceeded"},
    )
    response = JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "message": str(exc.detail),
            "request_id": request_id,
        },
    )
    response.headers["Retry-After"] = "60"
    return response


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# GZip compression for responses > 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)


@app.middleware("http")
async def security_headers_middleware(request: Request, call_next) -> Response:
    response: Response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
    return response


@app.middleware("http")
async def request_logging_middleware(request: Request, call_next) -> Response:
    request_id = str(uuid4())[:8]
    request.state.request_id = request_id
    start = time.monotonic()
    response: Response = await call_next(request)
    elapsed_ms = round((time.monotonic() - start) * 1000, 1)
    logger.info(
        "%s %s %s %.1fms [%s]",
        request.method,
        request.url.path,
        response.status_code,
        elapsed_ms,
        request_id,
        extra={
            "request_id": request_id,
            "path": request.url.path,
            "method": request.method,
            "status_code": response.status_code,
            "duration_ms": elapsed_ms,
        },
    )
    response.headers["X-Request-ID"] = request_id
    return response


# ---------------------------------------------------------------------------
# Prometheus metrics
# ---------------------------------------------------------------------------
from prometheus_fastapi_instrumentator import Instrumentator  # noqa: E402

_instrumentator = Instrumentator(
    excluded_handlers=["/metrics"],
    should_respect_env_var=False,
)
_instrumentator.instrument(app).expose(app, endpoint="/metrics", tags=["Health"])


def get_resolver(request: Request) -> AccessResolver:
    return request.app.state.resolver


def _session_auth(request: Request) -> AuthResult:
    auth: AuthResult | None = getattr(request.state, "auth", None)
    return auth or AuthResult(authenticated=False)


router = APIRouter()


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get("/health", tags=["Health"], summary="Health check")
async def health(request: Request):
    uptime_s = time.monotonic() - _STARTUP_TIME if _STARTUP_TIME > 0 else 0
    return {
        "status": "ok",
        "version": hrportal.__version__,
        "uptime_seconds": round(uptime_s, 1),
        "role_count": len(request.app.state.resolver.table),
        "backend_url": request.app.state.backend.base_url,
    }


# ---------------------------------------------------------------------------
# Access
# ---------------------------------------------------------------------------


@router.get("/access/roles", tags=["Access"], summary="List canonical roles")
async def list_roles(resolver: AccessResolver = Depends(get_resolver)):
    return {
        "roles": [
            {
                "role": role.value,
                "display_name": role_display_name(role.value),
                "default_route": resolver.table[role].default_route,
            }
            for role in SystemRole
        ],
        "fallback": FALLBACK_ROLE.value,
        "priority": [role.value for role in ROLE_PRIORITY],
    }


@router.get("/access/roles/{role}", tags=["Access"], summary="Resolve a single role")
async def get_role_access(role: str, resolver: AccessResolver = Depends(get_resolver)):
    """Unknown roles resolve to the fallback record; this never 404s."""
    parsed = parse_role(role)
    return {
        "role": role,
        "resolved_role": (parsed or FALLBACK_ROLE).value,
        "fallback": parsed is None,
        "access": resolver.resolve_role(role).to_dict(),
    }


@router.get(
    "/access/matrix",
    tags=["Access"],
    summary="Full role access table",
    dependencies=[
        Depends(require_access(roles=(SystemRole.SYSTEM_ADMIN,), features=("assignRoles",)))
    ],
)
async def access_matrix(resolver: AccessResolver = Depends(get_resolver)):
    return {role.value: record.to_dict() for role, record in resolver.table.items()}


@router.post("/access/combined", tags=["Access"], summary="Combined access for roles")
async def combined_access(req: RolesRequest, resolver: AccessResolver = Depends(get_resolver)):
    return resolver.get_combined_access(req.roles).to_dict()


@router.post("/access/check-route", tags=["Access"], summary="Check route access")
async def check_route(req: RouteCheckRequest, resolver: AccessResolver = Depends(get_resolver)):
    return {"route": req.route, "allowed": resolver.can_access_route(req.roles, req.route)}


@router.post("/access/check-feature", tags=["Access"], summary="Check feature flag")
async def check_feature(
    req: FeatureCheckRequest, resolver: AccessResolver = Depends(get_resolver)
):
    return {"feature": req.feature, "enabled": resolver.has_feature(req.roles, req.feature)}


@router.post("/access/default-route", tags=["Access"], summary="Landing page for roles")
async def default_route(req: RolesRequest, resolver: AccessResolver = Depends(get_resolver)):
    return {"default_route": resolver.get_default_route(req.roles)}


@router.get("/access/me", tags=["Access"], summary="Caller's combined access")
async def my_access(request: Request, resolver: AccessResolver = Depends(get_resolver)):
    auth = _session_auth(request)
    return {
        "identity": auth.identity,
        "provider": auth.provider,
        "roles": auth.roles,
        "access": resolver.get_combined_access(auth.roles).to_dict(),
    }


@router.post("/access/guard", tags=["Access"], summary="Evaluate route guard")
async def evaluate_guard(req: GuardRequest, request: Request):
    guard: RouteGuard = request.app.state.guard
    decision = guard.evaluate(
        session_from_request(request),
        req.path,
        GuardRequirements(
            required_route=req.required_route,
            required_roles=tuple(req.required_roles),
            required_features=tuple(req.required_features),
            redirect_to=req.redirect_to,
        ),
    )
    return {
        "state": decision.state.value,
        "allowed": decision.allowed,
        "redirect_to": decision.redirect_to,
        "reason": decision.reason,
    }


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


@router.get("/navigation", tags=["Navigation"], summary="Sidebar items for the caller")
async def navigation(
    request: Request, pathname: str = "/", resolver: AccessResolver = Depends(get_resolver)
):
    roles = _session_auth(request).roles
    return {
        "control_path": control_path(resolver, roles),
        "items": [
            {"name": item.name, "href": item.href, "active": is_active(pathname, item.href)}
            for item in visible_nav_items(resolver, roles)
        ],
    }


# ---------------------------------------------------------------------------
# Backend proxy
# ---------------------------------------------------------------------------


@router.api_route(
    "/backend/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    tags=["Backend"],
    summary="Forward a request to the HR backend",
)
@limiter.limit("120/minute")
async def proxy_backend(path: str, request: Request):
    backend: BackendProxy = request.app.state.backend
    upstream = await backend.forward(
        request.method,
        path,
        params=request.query_params.multi_items(),
        headers=dict(request.headers),
        content=await request.body(),
    )
    response = Response(content=upstream.content, status_code=upstream.status_code)
    for key, value in upstream.headers.multi_items():
        if key.lower() in RETURNED_HEADERS:
            response.headers.append(key, value)
    return response


app.include_router(router, include_in_schema=False)
app.include_router(router, prefix=_API_PREFIX)


# Version info endpoint (mounted on app, not the router)
@app.get("/api/version", tags=["Health"], summary="API version info")
async def api_version():
    """Return API version information."""
    return {"version": _API_VERSION, "api_prefix": _API_PREFIX}
