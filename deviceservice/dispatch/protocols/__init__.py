"""Built-in protocol handlers."""

from deviceservice.dispatch.protocols.base import ProtocolHandler
from deviceservice.dispatch.protocols.debug_echo import DebugEchoHandler
from deviceservice.dispatch.protocols.onvif import OnvifHandler

__all__ = ["DebugEchoHandler", "OnvifHandler", "ProtocolHandler"]
