"""
Retail Charity Platform API - Main Application.

FastAPI application with CORS enabled for the dashboard frontend.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__

# Create FastAPI application
app = FastAPI(
    title="Retail Charity Platform API",
    description="REST API for recording sales, managing stock and reporting charity contributions",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS - Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "retail-charity-platform-api"
    }


@app.get("/", tags=["Root"])
def root():
    """
    Root endpoint with API information.
    """
    return {
        "message": "Retail Charity Platform API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import customers, expenses, products, reports, sales

app.include_router(products.router, prefix="/api/v1", tags=["Products"])
app.include_router(customers.router, prefix="/api/v1", tags=["Customers"])
app.include_router(sales.router, prefix="/api/v1", tags=["Sales"])
app.include_router(expenses.router, prefix="/api/v1", tags=["Expenses"])
app.include_router(reports.router, prefix="/api/v1", tags=["Reports"])
