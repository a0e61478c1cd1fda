class LoxError(Exception):
    pass


class LoxSyntaxError(LoxError):
    """A static error found while scanning, parsing or resolving."""

    def __init__(self, message, line, where=""):
        self.message = message
        self.line = line
        self.where = where
        super().__init__(f"[line {line}] Error{where}: {message}")

    @classmethod
    def at(cls, token, message):
        return cls(message, token.line, token.where)


class LoxStaticError(LoxError):
    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("\n".join(str(e) for e in self.errors))


class LoxRuntimeError(LoxError):
    def __init__(self, token, message):
        self.token = token
        self.message = message
        super().__init__(message)

    def report(self) -> str:
        return f"[line {self.token.line}] Error{self.token.where}: {self.message}"


class ReturnSignal(BaseException):
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value
