"""
Main FastAPI application entry point.
Configures the application, middleware, and includes routers.
"""
from dotenv import load_dotenv

# Load environment variables from .env file first
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import logging

from .config import settings, validate_settings
from .database import Base, engine, SessionLocal
from .exceptions import register_exception_handlers
from .core.middleware import setup_middlewares
from .core.bootstrap import bootstrap_admin_if_needed
# Import all models here for creating tables
from .auth.models import User  # noqa: F401
from .core.audit_models import AuditLog  # noqa: F401
from .appointments.models import Appointment  # noqa: F401
from .medical_reports.models import MedicalReport  # noqa: F401
from .contacts.models import ContactMessage  # noqa: F401
from .auth.router import router as auth_router
from .admin.router import router as admin_router
from .appointments.router import router as appointments_router
from .medical_reports.router import router as reports_router
from .contacts.router import router as contact_router
from . import __version__

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Refuse to start with unsafe settings
validate_settings(settings)

# Create database tables if they don't exist
Base.metadata.create_all(bind=engine)

# Bootstrap admin creation
logger.info("🚀 Starting Clinic API...")
db = SessionLocal()
try:
    bootstrap_admin_if_needed(db)
except Exception as e:
    logger.error(f"❌ Bootstrap process failed: {str(e)}")
finally:
    db.close()

# Create FastAPI application
app = FastAPI(
    title="Clinic API",
    description="Authentication, appointments, medical reports and contact messages for a clinic",
    version=__version__
)

# Register exception handlers
register_exception_handlers(app)

# Configure CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Setup custom middleware
setup_middlewares(app)

# Include routers
app.include_router(auth_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(appointments_router, prefix="/api")
app.include_router(reports_router, prefix="/api")
app.include_router(contact_router, prefix="/api")

# Root endpoint
@app.get("/")
def root():
    """
    Root endpoint for API health check.

    Returns:
        dict: Simple welcome message
    """
    return {"success": True, "message": "Welcome to Clinic API"}

# Health check endpoint
@app.get("/api/health")
async def health_check():
    """
    Health check endpoint for monitoring.

    Returns:
        dict: Health status information
    """
    return {"success": True, "status": "healthy", "environment": settings.environment}
