# app/main.py
import uvicorn
import os
import logging
from datetime import datetime
from fastapi import FastAPI, HTTPException, Form, Depends
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi
from app.core.config import settings
from app.core.database import engine, Base
from app.core.auth import (
    fastapi_users,
    auth_backend,
    get_account_manager,
    AccountManager,
    AccountRead,
    AccountCreate,
)
from app.core.kis import KisClient
from app.utils.holdings import HoldingsPoller, TokenCache
from app.api.v1.api import api_router

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create all tables on startup; schema changes go through Alembic
async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "Authentication", "description": "Operations related to authentication"},
        {"name": "User Management", "description": "Household profile and partner link"},
        {"name": "Invitations", "description": "Partner invitations"},
        {"name": "Broker", "description": "Korea Investment & Securities integration"},
    ],
)

# Shared broker client, token cache and holdings poller
app.state.kis_client = KisClient()
app.state.token_cache = TokenCache()
app.state.holdings_poller = HoldingsPoller(app.state.kis_client, app.state.token_cache)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    # Add both OAuth2 password flow and Bearer token authentication
    openapi_schema["components"]["securitySchemes"] = {
        "OAuth2PasswordBearer": {
            "type": "oauth2",
            "flows": {
                "password": {
                    "tokenUrl": "/api/v1/auth/jwt/login",
                    "scopes": {}
                }
            }
        },
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer"
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi

# CORS Configuration
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",  # Local development
    "http://localhost:5173",  # Vite dev server
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for better error responses"""
    if isinstance(exc, HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail}
        )

    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

# ------------------------------------------------------------
# AUTHENTICATION ROUTES
# ------------------------------------------------------------

# Business routes (including the custom logout) before the FastAPI Users routers
app.include_router(api_router, prefix="/api/v1")

# JWT Login
app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/api/v1/auth/jwt",
    tags=["Authentication"],
)

# Registration
app.include_router(
    fastapi_users.get_register_router(AccountRead, AccountCreate),
    prefix="/api/v1/auth",
    tags=["Authentication"],
)

# Email verification and password reset routes
app.include_router(
    fastapi_users.get_verify_router(AccountRead),
    prefix="/api/v1/auth",
    tags=["Email Verification"],
)

app.include_router(
    fastapi_users.get_reset_password_router(),
    prefix="/api/v1/auth",
    tags=["Password Reset"],
)

@app.post("/api/v1/auth/verify-email", tags=["Email Verification"])
async def verify_email_custom(
    token: str = Form(...),
    account_manager: AccountManager = Depends(get_account_manager)
):
    """Email verification endpoint that accepts the token as form data"""
    try:
        await account_manager.verify(token)
        return {"message": "Email verified successfully"}
    except Exception as e:
        logger.error(f"Email verification failed: {str(e)}")
        raise HTTPException(status_code=400, detail="Invalid or expired verification token")

# ------------------------------------------------------------
# ROOT ENDPOINT
# ------------------------------------------------------------
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.APP_NAME} is running!",
        "version": settings.VERSION
    }

# ------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ------------------------------------------------------------
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "holdings_poller": app.state.holdings_poller.running,
    }

# ------------------------------------------------------------
# STARTUP / SHUTDOWN EVENTS
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    """Create database tables and start the holdings poller"""
    try:
        await create_db_and_tables()
        logger.info("✅ Database tables created successfully")
        logger.info(f"✅ Frontend URL: {settings.FRONTEND_URL}")
    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")

    if settings.KIS_POLLING_ENABLED:
        app.state.holdings_poller.start()
    else:
        logger.info("⚠️ Holdings polling disabled - dashboards use live lookups only")

@app.on_event("shutdown")
async def on_shutdown():
    await app.state.holdings_poller.stop()
    await app.state.kis_client.aclose()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=False)
