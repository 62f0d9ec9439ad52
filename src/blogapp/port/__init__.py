from .dao import BaseDAO, ResultSet
from .provider import BaseProvider

__all__ = ["BaseDAO", "BaseProvider", "ResultSet"]
