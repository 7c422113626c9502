from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app import config
from app.errors import error_response, register_error_handlers
from app.routes import auth, google_auth, products, two_factor
from app.security import allow_request, client_ip
from core.database import init_db

API_RATE_LIMIT = 1000
API_RATE_WINDOW_SECONDS = 15 * 60


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="Price Tracker API", version=config.APP_VERSION, lifespan=lifespan)

register_error_handlers(app)

app.include_router(auth.router)
app.include_router(google_auth.router)
app.include_router(products.router)
app.include_router(two_factor.router)


@app.middleware("http")
async def limit_api_requests(request: Request, call_next):
    if request.url.path.startswith("/api/") and not allow_request(
        f"api:{client_ip(request)}", limit=API_RATE_LIMIT, window_seconds=API_RATE_WINDOW_SECONDS
    ):
        return error_response("Too many API requests from this IP, please try again later.", 429)
    return await call_next(request)


@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
    response.headers.setdefault(
        "Content-Security-Policy",
        "default-src 'self'; img-src 'self' data:; frame-ancestors 'self';",
    )
    return response


# Outermost, so early 429 responses carry CORS headers too
app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health():
    return {
        "status": "OK",
        "message": "Price Tracker API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.APP_VERSION,
    }
