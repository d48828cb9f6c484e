from .network import NetworkError, SocketClient
from .session import ClientSession, SessionError

__all__ = ["SocketClient", "NetworkError", "ClientSession", "SessionError"]
