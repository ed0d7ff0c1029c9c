"""
CRM Solar - FastAPI Application Entry Point
"""
import os
import logging
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from fastapi.responses import FileResponse

from .config import get_settings
from .dependencies import get_gateway, get_notifications
from .routers import analytics_router, auth_router, leads_router, users_router
from .services.auth_service import AuthService, SessionContext, SessionStorage
from .services.lead_repository import LeadRepository
from .services.notifier import NotificationCenter
from .services.sheets_gateway import SheetsApiError, SheetsGateway
from .services.user_service import UserService

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# The frontend build is placed in backend/static after build
STATIC_DIR = Path(__file__).parent.parent / "static"


def create_app(
    gateway: Optional[SheetsGateway] = None,
    storage: Optional[SessionStorage] = None
) -> FastAPI:
    """Build the application around one gateway and one session."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events."""
        logger.info(f"Starting {settings.app_name} API...")
        user = app.state.session.restore()
        if user is not None:
            logger.info(f"Restored session for {user.email}")
            await app.state.lead_repository.refetch(app.state.session)

        yield

        logger.info(f"Shutting down {settings.app_name} API...")

    app = FastAPI(
        title=settings.app_name,
        description="Solar sales CRM: lead pipeline over a Google Sheets backend",
        version="1.0.0",
        lifespan=lifespan
    )

    notifications = NotificationCenter()
    app.state.gateway = gateway or SheetsGateway()
    app.state.notifications = notifications
    app.state.session = SessionContext(storage)
    app.state.auth_service = AuthService(app.state.gateway, notifications)
    app.state.lead_repository = LeadRepository(app.state.gateway, notifications)
    app.state.user_service = UserService(app.state.gateway, notifications)

    cors_origins = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:3000",
        "http://127.0.0.1:5173",
    ]
    # Add production URLs from environment
    if os.getenv("CORS_ORIGINS"):
        cors_origins.extend(os.getenv("CORS_ORIGINS").split(","))

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth_router)
    app.include_router(leads_router)
    app.include_router(analytics_router)
    app.include_router(users_router)

    @app.get("/api")
    def api_root():
        """API root endpoint - API info."""
        return {
            "name": settings.app_name,
            "version": "1.0.0",
            "status": "running",
            "docs": "/docs"
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.get("/api/ping")
    async def ping_sheet(gateway: SheetsGateway = Depends(get_gateway)):
        """Check that the Apps Script is reachable."""
        try:
            res = await gateway.ping()
        except SheetsApiError as e:
            return {"ok": False, "mensaje": e.message}
        return {"ok": res.ok, "mensaje": res.mensaje}

    @app.get("/api/notifications")
    def list_notifications(notifications: NotificationCenter = Depends(get_notifications)):
        """Toasts raised by the last operations, oldest first."""
        return [
            {
                "title": n.title,
                "description": n.description,
                "variant": n.variant,
                "created_at": n.created_at.isoformat(),
            }
            for n in notifications.history()
        ]

    # Serve static frontend files in production
    if STATIC_DIR.exists():
        app.mount("/assets", StaticFiles(directory=STATIC_DIR / "assets"), name="assets")

        # Catch-all route for SPA - must be after all API routes
        @app.get("/{full_path:path}")
        async def serve_spa(full_path: str):
            """Serve the SPA for all non-API routes."""
            if full_path.startswith("api/"):
                return {"error": "Not found"}

            file_path = STATIC_DIR / full_path
            if file_path.exists() and file_path.is_file():
                return FileResponse(file_path)

            return FileResponse(STATIC_DIR / "index.html")

    return app


app = create_app()
