import logging
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from postgrest.exceptions import APIError
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException
from supabase import Client

from shifttree.config.settings import settings
from shifttree.database.supabase_client import check_database, get_supabase
from shifttree.modules.auth import routes as auth_routes
from shifttree.modules.schedules import routes as schedules_routes
from shifttree.modules.shifts import routes as shifts_routes
from shifttree.modules.signups import routes as signups_routes

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

# Postgres error codes surfaced by PostgREST
DB_ERROR_STATUS = {
    "23505": (409, "Resource already exists"),  # unique_violation
    "23503": (400, "Referenced resource does not exist"),  # foreign_key_violation
    "23514": (400, "Value violates a constraint"),  # check_violation
}

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
app = FastAPI(
    title=settings.app_name,
    debug=settings.debug,
    redirect_slashes=False,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = [
        {
            "path": "/" + "/".join(str(part) for part in err.get("loc", ())),
            "message": err.get("msg", ""),
            "errorCode": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    logger.info("Request validation failed for %s %s: %s", request.method, request.url.path, errors)
    message = errors[0]["message"] if errors else "Request validation failed"
    return JSONResponse(status_code=400, content={"message": message, "errors": errors, "status": 400})


@app.exception_handler(APIError)
async def database_exception_handler(request: Request, exc: APIError):
    status_code, message = DB_ERROR_STATUS.get(exc.code, (500, "Internal Server Error"))
    if status_code == 500:
        logger.exception("Database error on %s %s: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("Database rejected %s %s (%s): %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    if settings.is_production:
        return JSONResponse(status_code=500, content={"error": "Internal Server Error"})
    return JSONResponse(status_code=500, content={"error": str(exc)})


class SecurityHeadersMiddleware:
    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message):
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                message["headers"].extend([
                    (b"X-Content-Type-Options", b"nosniff"),
                    (b"X-Frame-Options", b"DENY"),
                    (b"Referrer-Policy", b"no-referrer"),
                ])
            await send(message)

        await self.app(scope, receive, send_with_headers)


app.add_middleware(SlowAPIMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins_list(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include module routes
app.include_router(auth_routes.router, prefix=settings.api_prefix)
app.include_router(schedules_routes.router, prefix=settings.api_prefix)
app.include_router(shifts_routes.router, prefix=settings.api_prefix)
app.include_router(signups_routes.router, prefix=settings.api_prefix)


@app.on_event("startup")
async def startup_event():
    logger.info("Application startup (environment=%s, api_prefix=%s)", settings.environment, settings.api_prefix)
    if not settings.jwt_secret:
        logger.warning("JWT_SECRET is not set; every authenticated request will fail")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Application shutdown")


@app.get("/")
@limiter.exempt
async def root():
    return {"message": "Welcome to shifttree-backend", "status": "healthy"}


@app.get("/health")
@limiter.exempt
async def health():
    return {"status": "healthy"}


@app.get("/ready")
@limiter.exempt
async def ready(supabase: Client = Depends(get_supabase)):
    """Readiness probe: one round-trip to the database"""
    if not check_database(supabase):
        return JSONResponse(status_code=503, content={"status": "unavailable"})
    return {"status": "ready"}


def run():
    import uvicorn

    uvicorn.run("shifttree.main:app", host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
