import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from lead_funnel.api.counselling import router as counselling
from lead_funnel.api.form import router as form
from lead_funnel.config import settings
from lead_funnel.database.db import create_tables, engine, test_db_connection
from lead_funnel.services.google_sheets import GoogleSheetsService
from lead_funnel.shared.schemas import HealthResponse

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting up application...")
    if not await test_db_connection():
        logger.warning(
            "Database connection could not be established on startup."
        )
    else:
        logger.info("Database connection successful.")
        await create_tables()

    app.state.sheets_service = None
    service_account_info = settings.google_service_account_info
    if service_account_info and settings.GOOGLE_SHEET_ID_EXPORT:
        try:
            app.state.sheets_service = GoogleSheetsService(service_account_info)
            logger.info("Google Sheets service initialized.")
        except Exception as e:
            logger.error(f"Google Sheets export disabled: {e}")
    else:
        logger.info("Google Sheets export is not configured.")

    yield
    # Shutdown
    logger.info("Shutting down application...")
    await engine.dispose()


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

app.include_router(form.router, prefix="/api/v1", tags=["Form"])
app.include_router(counselling.router, prefix="/api/v1", tags=["Counselling"])


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """
    Checks the health of the application and its database connection.
    """
    db_ok = await test_db_connection()
    return HealthResponse(
        status="ok", db_connection="ok" if db_ok else "failed"
    )
