from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from config import settings
from config.database import Database
from routes import (
    user_routes,
    provider_routes,
    booking_routes,
    review_routes,
    relative_routes,
    emergency_routes
)
from services.booking_service import validation_errors_from_pydantic
from services.exceptions import BookingError, RepositoryError
from services.notifier import build_notifier
import uvicorn
import logging

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler()]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Aashray Senior Care Booking API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(user_routes.router, prefix="/api")
app.include_router(provider_routes.router, prefix="/api")
app.include_router(booking_routes.router, prefix="/api")
app.include_router(review_routes.router, prefix="/api")
app.include_router(relative_routes.router, prefix="/api")
app.include_router(emergency_routes.router, prefix="/api")


@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request data", "errors": validation_errors_from_pydantic(exc)}
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})


@app.exception_handler(RepositoryError)
async def repository_error_handler(request: Request, exc: RepositoryError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=503,
        content={"message": "The service is temporarily unavailable. Please try again in a moment."}
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}", exc_info=exc)
    return JSONResponse(status_code=500, content={"message": "Something went wrong. Please try again later."})


@app.on_event("startup")
async def startup():
    try:
        await Database.connect_db()
        app.state.notifier = build_notifier(settings.NOTIFIER_BACKEND)
        logger.info(f"Using {settings.NOTIFIER_BACKEND} notifier")
    except Exception as e:
        logger.error(f"Error during startup: {str(e)}", exc_info=True)
        raise


@app.on_event("shutdown")
async def shutdown():
    try:
        await Database.close_db()
    except Exception as e:
        logger.error(f"Error during shutdown: {str(e)}")


@app.get("/")
def read_root():
    return {"message": "Welcome to the Aashray Senior Care Booking API"}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
