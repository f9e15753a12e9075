from .cleanup_expired_use_case import CleanupExpiredUseCase, CleanupResponse

__all__ = ["CleanupExpiredUseCase", "CleanupResponse"]
