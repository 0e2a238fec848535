from services.enrollments_service.routers.enrollments import router as enrollments_router

__all__ = ["enrollments_router"]
