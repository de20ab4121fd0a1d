# ClinicClock - Main Application
# FastAPI application factory and startup

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clinicclock.config import get_settings
from clinicclock.database import check_connection, init_db
from clinicclock.services.mailer import EmailReportDispatcher
from clinicclock.services.pending import PendingSetupStore
from clinicclock.services.scheduler import create_report_scheduler
from clinicclock.services.sync import SafeSync


settings = get_settings()
logger = logging.getLogger("clinicclock")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan events.
    
    Startup: verify the database, create missing tables, arm the daily
    report. Shutdown: stop the report scheduler.
    """
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting %s...", settings.app_name)
    
    try:
        check_connection()
        logger.info("Database connection: OK")
    except Exception as e:
        logger.error("Database connection: FAILED - %s", e)
        if not settings.debug:
            raise
    
    if settings.create_tables_on_startup:
        init_db()
    
    if settings.report_scheduler_enabled:
        app.state.report_scheduler = create_report_scheduler(app.state.dispatcher)
        app.state.report_scheduler.start()
    
    yield
    
    logger.info("Shutting down %s...", settings.app_name)
    if app.state.report_scheduler is not None:
        app.state.report_scheduler.shutdown()
        app.state.report_scheduler = None


def create_app(sync: SafeSync | None = None) -> FastAPI:
    """
    Application factory.
    
    Creates and configures the FastAPI application.
    """
    app = FastAPI(
        title=settings.app_name,
        description=f"Attendance kiosk for {settings.clinic_name}",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )
    
    # Shared collaborators, reachable from dependencies via app.state
    app.state.sync = sync or SafeSync()
    app.state.pending_setups = PendingSetupStore(settings.pending_setup_ttl_seconds)
    app.state.dispatcher = EmailReportDispatcher(settings)
    app.state.report_scheduler = None
    
    # Include routers
    from clinicclock.routes import admin, kiosk
    app.include_router(kiosk.router)
    app.include_router(admin.router)
    
    # Health check endpoint
    @app.get("/health")
    def health_check():
        """Health check endpoint for monitoring."""
        try:
            check_connection()
            db_status = "healthy"
        except Exception as e:
            db_status = f"unhealthy: {e}"
        
        scheduler = app.state.report_scheduler
        return {
            "status": "ok",
            "app": settings.app_name,
            "database": db_status,
            "report_scheduler": scheduler.state if scheduler else "disabled",
        }
    
    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    
    uvicorn.run(
        "clinicclock.main:app",
        host="0.0.0.0",
        port=8001,
        reload=settings.debug,
    )
