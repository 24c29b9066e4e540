"""
FastAPI application for transportation orders.
Provides read-only REST endpoints over the order repository.
"""

import logging
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException

from . import __version__
from .schemas import HealthResponse, TransportationOrderSchema
from .service import OrderNotFoundError, TransportationOrderService


logger = logging.getLogger(__name__)

# Global service instance
service: Optional[TransportationOrderService] = None


def get_service() -> TransportationOrderService:
    """Dependency to get service instance."""
    global service
    if service is None:
        service = TransportationOrderService.from_settings()
    return service


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Transportation Order Server",
        description="Read access to truck transportation orders",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc"
    )

    @app.get("/health", response_model=HealthResponse)
    def health_check(svc: TransportationOrderService = Depends(get_service)):
        """Health check endpoint."""
        health_data = svc.health_check()
        return HealthResponse(
            status=health_data["status"],
            version=__version__,
            database_connected=health_data["database_connected"],
            orders=health_data["orders"],
            timestamp=health_data["timestamp"]
        )

    @app.get("/transportationorders", response_model=List[TransportationOrderSchema])
    def get_orders(svc: TransportationOrderService = Depends(get_service)):
        """Get all transportation orders."""
        try:
            orders = svc.list_orders()
            return [TransportationOrderSchema.model_validate(order) for order in orders]
        except Exception as e:
            logger.error(f"Failed to get orders: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/transportationorders/{truck}", response_model=TransportationOrderSchema)
    def get_order(truck: str, svc: TransportationOrderService = Depends(get_service)):
        """Get the transportation order assigned to a truck."""
        try:
            order = svc.get_order(truck)
            return TransportationOrderSchema.model_validate(order)
        except OrderNotFoundError as e:
            logger.warning(str(e))
            raise HTTPException(status_code=404, detail=str(e))
        except Exception as e:
            logger.error(f"Failed to get order for truck {truck}: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    return app


# Create the app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8080)
