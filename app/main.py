import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from app.capture import PaymentLocks
from app.cloudinary_service import MediaUploader, configure_cloudinary
from app.config import PORT, Settings, load_settings
from app.database import Base, create_db_engine, create_session_factory
from app.errors import PaymentFlowError
from app.middleware import BodySizeLimitMiddleware
from app.razorpay_service import PaymentGateway
from app.repository import ImageRecordStore
from app.routes import router

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # uvicorn leaves the root logger at WARNING
    logging.getLogger("app").setLevel(level)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    configure_logging(settings.log_level)
    engine = create_db_engine(settings.database_url)
    Base.metadata.create_all(bind=engine)
    logger.info("Connected to database")

    configure_cloudinary(
        settings.cloudinary_cloud_name,
        settings.cloudinary_api_key,
        settings.cloudinary_api_secret,
    )
    app.state.store = ImageRecordStore(create_session_factory(engine))
    app.state.gateway = PaymentGateway.from_credentials(
        settings.razorpay_key_id, settings.razorpay_key_secret
    )
    app.state.uploader = MediaUploader()
    app.state.payment_locks = PaymentLocks()
    try:
        yield
    finally:
        engine.dispose()
        logger.info("Database connection closed")


def register_middlewares(app: FastAPI, settings: Settings) -> None:
    # Added last runs first: CORS wraps the size guard so 413s carry CORS headers
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=settings.max_body_bytes)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PaymentFlowError)
    async def payment_flow_error(request: Request, exc: PaymentFlowError):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if not errors:
            return JSONResponse(status_code=400, content={"error": "Invalid request"})
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
        return JSONResponse(status_code=400, content={"error": message})


def create_app(settings: Settings = None) -> FastAPI:
    settings = settings or load_settings()
    app = FastAPI(title="Custom Shirt Payment Service", lifespan=lifespan)
    app.state.settings = settings
    register_middlewares(app, settings)
    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return "Hello World!"

    return app


app = create_app()


if __name__ == "__main__":
    configure_logging(app.state.settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=PORT)
