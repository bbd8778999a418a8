"""
Main FastAPI application entry point.
Business Dashboard - profit analysis data service
"""
import logging

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse, JSONResponse

from bizdash.config import DATA_BACKEND, LOG_LEVEL
from bizdash.database import init_database
from bizdash.templates_config import templates
from bizdash.routes import auth_routes, profit_routes

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Business Dashboard",
    description="Profit analysis transactions with server-side or fallback pagination",
    version="1.0.0"
)


# Initialize database on startup
@app.on_event("startup")
async def startup_event():
    if DATA_BACKEND == "sql":
        init_database()
    logger.info("Business Dashboard started with '%s' data backend", DATA_BACKEND)


# Root redirect
@app.get("/")
async def root():
    return RedirectResponse(url="/profit", status_code=302)


# Include route modules
app.include_router(auth_routes.router, tags=["Authentication"])
app.include_router(profit_routes.router, prefix="/profit", tags=["Profit Analysis"])


def _wants_json(request: Request) -> bool:
    return "/api/" in request.url.path or "application/json" in request.headers.get("accept", "")


# Error handlers
@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    if _wants_json(request):
        return JSONResponse({"error": "Not found"}, status_code=404)
    return templates.TemplateResponse(
        request, "error.html",
        {"error_code": 404, "error_message": "Page not found"},
        status_code=404
    )


@app.exception_handler(500)
async def server_error_handler(request: Request, exc):
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    if _wants_json(request):
        return JSONResponse({"error": "Internal server error"}, status_code=500)
    return templates.TemplateResponse(
        request, "error.html",
        {"error_code": 500, "error_message": "Internal server error"},
        status_code=500
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("bizdash.main:app", host="127.0.0.1", port=8000, reload=True)
