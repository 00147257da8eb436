from .user import User
from .appliance import Appliance

__all__ = ["User", "Appliance"]
