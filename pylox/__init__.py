from .session import LoxSession
from .errors import LoxError, LoxSyntaxError, LoxStaticError, LoxRuntimeError

__all__ = ["LoxSession", "LoxError", "LoxSyntaxError", "LoxStaticError", "LoxRuntimeError"]
