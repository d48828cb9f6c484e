from .messaging import MessagingManager
from .rooms import RoomManager

__all__ = ["MessagingManager", "RoomManager"]
