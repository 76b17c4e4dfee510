from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
import logging
import os
from dotenv import load_dotenv
from routes import init_routes
from db.mongo import init_db, close_db, client
from services.errors import ServiceError

logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))
CORS_ALLOW_ORIGINS = os.getenv("CORS_ALLOW_ORIGINS", "*")
STATIC_DIR = os.getenv("STATIC_DIR", "public")

db_connected = False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify the store and create indexes on startup, close it on shutdown"""
    global db_connected
    logger.info("Starting Calendar & Todo API")
    if client is not None:
        await init_db()
        db_connected = True
    else:
        logger.error("MongoDB client not available, API requests will fail")
    yield
    close_db()
    db_connected = False
    logger.info("Calendar & Todo API shut down")


app = FastAPI(
    title="Calendar & Todo API",
    description="Calendar events and todo lists stored in MongoDB",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
origins = (
    ["*"]
    if CORS_ALLOW_ORIGINS == "*"
    else [o.strip() for o in CORS_ALLOW_ORIGINS.split(",") if o.strip()]
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=origins != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are reported like any other validation failure"""
    messages = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        messages.append(f"{location}: {err.get('msg')}")
    return JSONResponse(status_code=400, content={"error": "Invalid request: " + "; ".join(messages)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unexpected error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health")
async def health():
    return {"status": "ok", "db_connected": db_connected}


init_routes(app)

# Serve the frontend, if there is one, after all API routes
if os.path.isdir(STATIC_DIR):
    app.mount("/", StaticFiles(directory=STATIC_DIR, html=True), name="static")


if __name__ == "__main__":
    import uvicorn
    logger.info(f"Calendar & Todo server running on http://localhost:{PORT}")
    uvicorn.run("main:app", host=HOST, port=PORT)
