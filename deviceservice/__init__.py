"""
deviceservice - control-plane gateway for device discovery handlers.
"""

__version__ = "0.1.0"
__logo__ = "📡"
