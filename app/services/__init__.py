from app.services.optimization import optimization_service

__all__ = ["optimization_service"]
