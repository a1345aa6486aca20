from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
import logging

# Import database components
from app.database.database import engine, Base

# Import routers
from app.modules.numbering.router import router as numbering_router
from app.modules.masters.router import customers_router, suppliers_router, vehicles_router
from app.modules.lorry_receipts.router import router as lorry_receipts_router
from app.modules.invoices.router import router as invoices_router
from app.modules.truck_hiring_notes.router import router as truck_hiring_notes_router
from app.modules.payments.router import router as payments_router
from app.modules.ledgers.router import router as ledgers_router
from app.modules.data.router import router as data_router

# Import models for table creation
import app.modules.numbering.models
import app.modules.masters.models
import app.modules.lorry_receipts.models
import app.modules.invoices.models
import app.modules.payments.models
import app.modules.truck_hiring_notes.models

from app.core.config import settings

# Configure logging
logging.basicConfig(
    level=logging.INFO if settings.ENVIRONMENT == "production" else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# FastAPI app
app = FastAPI(
    title="Transport Ledger API",
    description="Lorry receipts, invoices, truck hiring notes and payments for a transport business",
    version="1.0.0",
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None
)

app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Add your frontend URLs
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(numbering_router)
app.include_router(customers_router)
app.include_router(vehicles_router)
app.include_router(suppliers_router)
app.include_router(lorry_receipts_router)
app.include_router(invoices_router)
app.include_router(truck_hiring_notes_router)
app.include_router(payments_router)
app.include_router(ledgers_router)
app.include_router(data_router)

# Create database tables (only for development - use migrations in production)
if settings.ENVIRONMENT == "development":
    Base.metadata.create_all(bind=engine)


@app.get("/")
async def read_root():
    return {
        "message": "Transport Ledger API is running",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "environment": settings.ENVIRONMENT}


@app.on_event("startup")
async def startup_event():
    logger.info("Transport Ledger API starting up...")
    logger.info(f"Environment: {settings.ENVIRONMENT}")
    logger.info(f"Debug mode: {settings.DEBUG}")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Transport Ledger API shutting down...")
