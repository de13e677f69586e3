"""NutriLens MCP Server - Entry point.

Runs the MCP server with HTTP transport behind a small Starlette app that
also serves health and account registration routes.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route, Mount

from .shell.mcp_server import mcp, current_user_id, get_auth_client, get_firestore_client
from .shell.auth import EmailAlreadyRegistered, validate_api_key_format, hash_api_key
from .core.models import UserProfile


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ==================== Route Handlers ====================


async def health_check(request: Request) -> JSONResponse:
    """Liveness probe."""
    return JSONResponse({"status": "healthy", "service": "nutrilens-mcp"})


async def register_user(request: Request) -> JSONResponse:
    """Register a new user, seed their profile and return their API key."""
    try:
        body = await request.json()
    except ValueError:
        return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

    if not isinstance(body, dict):
        return JSONResponse({"error": "Request body must be JSON"}, status_code=400)

    email = body.get("email")
    name = body.get("name")
    email = email.strip() if isinstance(email, str) else ""
    name = name.strip() if isinstance(name, str) else ""

    if not email or "@" not in email:
        return JSONResponse({"error": "Valid email is required"}, status_code=400)
    if not name:
        return JSONResponse({"error": "Name is required"}, status_code=400)

    try:
        api_key, user_id = get_auth_client().register_user(email, name)
    except EmailAlreadyRegistered:
        return JSONResponse(
            {"error": "An account with this email already exists."}, status_code=409
        )
    except Exception as e:
        logger.error("Registration failed: %s", str(e))
        return JSONResponse({"error": "Registration failed."}, status_code=500)

    if not get_firestore_client().save_profile(user_id, UserProfile(name=name)):
        logger.warning("Default profile not saved for user: %s", user_id[:8])

    base_url = os.environ.get("BASE_URL", "http://localhost:8080")

    return JSONResponse({
        "api_key": api_key,
        "message": "Registration successful! Save your API key - it won't be shown again.",
        "mcp_url": f"{base_url}/mcp",
    })


async def validate_key(request: Request) -> JSONResponse:
    """Validate an API key."""
    try:
        body = await request.json()
        api_key = body.get("api_key")

        if not api_key:
            return JSONResponse({"valid": False, "error": "API key required"})

        user_id = get_auth_client().validate_api_key(api_key)
        return JSONResponse({"valid": user_id is not None})

    except Exception as e:
        logger.error("Validation failed: %s", str(e))
        return JSONResponse({"valid": False, "error": "Validation failed"})


# ==================== Auth Middleware ====================


class AuthMiddleware(BaseHTTPMiddleware):
    """Authenticate MCP requests using API key in Authorization header."""

    async def dispatch(self, request: Request, call_next):
        if not request.url.path.startswith("/mcp"):
            return await call_next(request)

        auth_header = request.headers.get("Authorization", "")

        if auth_header.startswith("Bearer "):
            api_key = auth_header.removeprefix("Bearer ")

            if validate_api_key_format(api_key):
                user_id = hash_api_key(api_key)

                if get_auth_client().user_exists(user_id):
                    current_user_id.set(user_id)
                    logger.debug("Authenticated user: %s", user_id[:8])

        return await call_next(request)


# ==================== Create ASGI App ====================


def create_app() -> Starlette:
    """Create the Starlette application with MCP mounted at root.

    The MCP streamable_http_app() serves /mcp itself; its lifespan starts
    the session manager.
    """
    mcp_app = mcp.streamable_http_app()

    routes = [
        Route("/health", health_check, methods=["GET"]),
        Route("/auth/register", register_user, methods=["POST"]),
        Route("/auth/validate", validate_key, methods=["POST"]),
        Mount("/", app=mcp_app),
    ]

    allowed_origins = os.environ.get("CORS_ORIGINS", "http://localhost:5173").split(",")

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=allowed_origins,
                allow_methods=["GET", "POST", "OPTIONS"],
                allow_headers=["*"],
            ),
            Middleware(AuthMiddleware),
        ],
        lifespan=mcp_app.router.lifespan_context,
    )

    return app


app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting NutriLens MCP server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
