"""
Core Ledger API Application Factory
"""

from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .clients import router as clients_router
from .accounts import router as accounts_router
from .operations import router as operations_router
from .admin import router as admin_router
from ..bank import Bank
from .. import __version__


def create_app(bank: Optional[Bank] = None) -> FastAPI:
    """Create and configure the FastAPI application around one Bank"""
    app = FastAPI(
        title="Core Ledger API",
        description="Banking ledger with per-account transaction logs and atomic transfers",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    app.state.bank = bank or Bank()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(clients_router, prefix="/clients", tags=["Clients"])
    app.include_router(accounts_router, prefix="/accounts", tags=["Accounts"])
    app.include_router(operations_router, prefix="/operations", tags=["Operations"])
    app.include_router(admin_router, prefix="/admin", tags=["Admin"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": "core_ledger_api",
            "version": __version__
        }

    @app.get("/")
    async def get_api_info():
        """Get API information"""
        return {
            "name": "Core Ledger API",
            "version": __version__,
            "endpoints": {
                "docs": "/docs",
                "health": "/health",
                "clients": "/clients",
                "accounts": "/accounts",
                "operations": "/operations",
                "admin": "/admin"
            }
        }

    return app


def run_server(host: str = "127.0.0.1", port: int = 8090, bank: Optional[Bank] = None) -> None:
    """Run the API with uvicorn"""
    uvicorn.run(create_app(bank), host=host, port=port, access_log=False)
