"""
Application entry point for the PrimeNest Real Estate assistant API.

This module initializes the FastAPI application, configures global
middleware such as CORS, sets up shared application state in the
lifespan handler, and registers all API route modules.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.auth import AuthError, auth_error_handler
from app.api.routes import chat, posts
from app.services.chat_service import ChatService
from code_modules.session_store import SessionStore
from config_loader import load_app_config, load_auth_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

CONFIG_PATH = os.environ.get("PRIMENEST_CONFIG", "config.ini")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Build the session store and the ChatService from config.ini and run
    the idle-session sweeper for the lifetime of the app.
    """
    config = load_app_config(CONFIG_PATH)
    assistant = config.assistant
    session_store = SessionStore(
        max_history=assistant.max_history,
        session_timeout=assistant.session_timeout,
        max_sessions=assistant.max_sessions,
        sweep_interval=assistant.sweep_interval,
    )
    app.state.auth_config = config.auth
    app.state.session_store = session_store
    app.state.chat_service = ChatService.from_config(config, session_store)
    session_store.start_sweeper()
    logger.info("PrimeNest assistant API started")
    try:
        yield
    finally:
        session_store.stop_sweeper()
        logger.info("PrimeNest assistant API stopped")


# ---------------------------------------------------------
# Create FastAPI application instance
# ---------------------------------------------------------

app = FastAPI(title="PrimeNest Real Estate Assistant API", lifespan=lifespan)


# ---------------------------------------------------------
# Configure CORS middleware
# Cookies are sent cross-origin, so origins are listed explicitly
# ---------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_auth_config(CONFIG_PATH).allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(AuthError, auth_error_handler)

# ---------------------------------------------------------
# Register API routers
# ---------------------------------------------------------
app.include_router(chat.router, prefix="/api/assistant", tags=["Assistant"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
