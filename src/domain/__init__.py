from src.domain.models import User

__all__ = ["User"]
