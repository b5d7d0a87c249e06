from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from app.routes import auth as auth_routes
from app.routes import tables as tables_routes
from app.routes import dishes as dishes_routes
from app.routes import orders as orders_routes
from app.routes import order_items as order_items_routes
from app.routes import reservations as reservations_routes
from app.routes import kitchen as kitchen_routes
from app.core.config import settings
from app.core.exceptions import ApiError
from app.db import session as db_session
import logging
import threading
from collections import defaultdict
import time

app = FastAPI(
    title="Restaurant API",
    version="1.0.0",
    description="Orders, kitchen workflow and table reservations",
    # Avoid automatic 307 redirects between /path and /path/
    # Collection roots are registered under both variants instead.
    redirect_slashes=False,
)

# Configure logging level from env
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))
# Use a dedicated app logger to avoid uvicorn.access formatter expectations
_req_logger = logging.getLogger("app.request")
_req_logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
_err_logger = logging.getLogger("app.errors")

# In-memory request counters per route (method + path), guarded by a lock
_request_counts = defaultdict(int)
_req_lock = threading.Lock()


@app.middleware("http")
async def request_count_middleware(request: Request, call_next):
    route = request.scope.get("route")
    key_path = getattr(route, "path", None) or request.url.path
    key = f"{request.method} {key_path}"

    with _req_lock:
        _request_counts[key] += 1
        count_val = _request_counts[key]

    # Log every N hits to avoid spam
    if count_val % settings.REQUEST_LOG_EVERY_N == 0:
        _req_logger.info("Request count threshold reached: %s -> %s", key, count_val)

    db_counter = [0]
    db_count_token = db_session.request_db_query_count.set(db_counter)
    start = time.perf_counter()
    try:
        response = await call_next(request)
    finally:
        db_session.request_db_query_count.reset(db_count_token)
    duration_ms = int((time.perf_counter() - start) * 1000)

    if settings.REQUEST_LOG_VERBOSE:
        prefixes = [p.strip() for p in settings.REQUEST_LOG_INCLUDE_PREFIXES.split(",") if p.strip()]
        if any(request.url.path.startswith(pref) for pref in prefixes):
            _req_logger.info(
                "%s %s -> %s in %sms | route_count=%s db_queries=%s total_db_queries=%s",
                request.method,
                request.url.path,
                response.status_code,
                duration_ms,
                count_val,
                db_counter[0],
                db_session.get_global_db_queries_total(),
            )
    return response


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [
        {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg")}
        for err in exc.errors()
    ]
    first = errors[0] if errors else {"loc": [], "msg": "Invalid request"}
    message = f"{'.'.join(first['loc'][1:]) or 'request'}: {first['msg']}"
    return JSONResponse(status_code=400, content={"message": message, "errors": errors})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    _err_logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(auth_routes.router)
app.include_router(tables_routes.router)
app.include_router(dishes_routes.router)
app.include_router(orders_routes.router)
app.include_router(order_items_routes.router)
app.include_router(reservations_routes.router)
app.include_router(kitchen_routes.router)


@app.on_event("startup")
def on_startup():
    # create database tables if they don't exist
    db_session.create_db()


@app.get("/")
def root():
    return {"status": "ok"}
