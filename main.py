import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import LOG_LEVEL, UPLOAD_STORE
from routers import contracts_router, session_router, upload_router
from services.errors import RelayError

# Import DB init function
from database import Base, engine
from models.session_db_model import UploadRecordDB

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

def create_db():
    Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Contract Workbench Relay",
    description="Relays contract generation, evaluation and comparison requests to the legal AI backend.",
    version="0.1.0",
)

# Only the SQL upload store needs tables
@app.on_event("startup")
def on_startup():
    if UPLOAD_STORE == "sql":
        logger.info("Initializing database...")
        create_db()
        logger.info("Database initialized.")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError):
    logger.error("%s on %s: %s", type(exc).__name__, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": {"errors": jsonable_errors(exc)}},
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

def jsonable_errors(exc: RequestValidationError):
    return [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in exc.errors()]

app.include_router(session_router.router)
app.include_router(upload_router.router)
app.include_router(contracts_router.router)

@app.get("/")
async def root():
    return {"message": "Contract Workbench relay is running"}

if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000)
