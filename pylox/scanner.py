from __future__ import annotations
from enum import Enum, auto
from .errors import LoxSyntaxError


class TK(Enum):
    # Single-character tokens
    LPAREN = auto()     # (
    RPAREN = auto()     # )
    LBRACE = auto()     # {
    RBRACE = auto()     # }
    COMMA = auto()      # ,
    DOT = auto()        # .
    MINUS = auto()      # -
    PLUS = auto()       # +
    SEMICOLON = auto()  # ;
    SLASH = auto()      # /
    STAR = auto()       # *
    # One or two character tokens
    BANG = auto()       # !
    NEQ = auto()        # !=
    ASSIGN = auto()     # =
    EQ = auto()         # ==
    GT = auto()         # >
    GE = auto()         # >=
    LT = auto()         # <
    LE = auto()         # <=
    # Literals
    NAME = auto()
    STRING = auto()
    NUMBER = auto()
    # Keywords
    AND = auto()
    CLASS = auto()
    ELSE = auto()
    FALSE = auto()
    FUN = auto()
    FOR = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    SUPER = auto()
    THIS = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()
    EOF = auto()


KEYWORDS = {
    "and": TK.AND, "class": TK.CLASS, "else": TK.ELSE, "false": TK.FALSE,
    "for": TK.FOR, "fun": TK.FUN, "if": TK.IF, "nil": TK.NIL, "or": TK.OR,
    "print": TK.PRINT, "return": TK.RETURN, "super": TK.SUPER,
    "this": TK.THIS, "true": TK.TRUE, "var": TK.VAR, "while": TK.WHILE,
}

_SINGLE = {
    "(": TK.LPAREN, ")": TK.RPAREN, "{": TK.LBRACE, "}": TK.RBRACE,
    ",": TK.COMMA, ".": TK.DOT, "-": TK.MINUS, "+": TK.PLUS,
    ";": TK.SEMICOLON, "*": TK.STAR,
}

# char -> (kind if followed by '=', kind otherwise)
_WITH_EQUALS = {
    "!": (TK.NEQ, TK.BANG),
    "=": (TK.EQ, TK.ASSIGN),
    "<": (TK.LE, TK.LT),
    ">": (TK.GE, TK.GT),
}


class Token:
    __slots__ = ("kind", "lexeme", "literal", "line")

    def __init__(self, kind: TK, lexeme: str, literal: object, line: int):
        self.kind = kind
        self.lexeme = lexeme
        self.literal = literal
        self.line = line

    @property
    def where(self) -> str:
        if self.kind == TK.EOF:
            return " at end"
        return f" at '{self.lexeme}'"

    def __repr__(self):
        return f"Token({self.kind}, {self.lexeme!r}, {self.literal!r}, line={self.line})"


def _is_alpha(ch: str) -> bool:
    return ("a" <= ch <= "z") or ("A" <= ch <= "Z") or ch == "_"


def _is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class Scanner:
    def __init__(self, source: str):
        self.source = source
        self.start = 0
        self.pos = 0
        self.line = 1
        self.tokens: list[Token] = []
        self.errors: list[LoxSyntaxError] = []
        self._scan_tokens()

    def _at_end(self) -> bool:
        return self.pos >= len(self.source)

    def _char(self) -> str:
        return self.source[self.pos] if self.pos < len(self.source) else ""

    def _peek(self, offset: int = 1) -> str:
        p = self.pos + offset
        return self.source[p] if p < len(self.source) else ""

    def _advance(self) -> str:
        ch = self.source[self.pos]
        if ch == "\n":
            self.line += 1
        self.pos += 1
        return ch

    def _match(self, expected: str) -> bool:
        if self.pos < len(self.source) and self.source[self.pos] == expected:
            self._advance()
            return True
        return False

    def _error(self, msg: str, line: int | None = None):
        self.errors.append(LoxSyntaxError(msg, line or self.line))

    def _add(self, kind: TK, literal: object = None, line: int | None = None):
        lexeme = self.source[self.start : self.pos]
        self.tokens.append(Token(kind, lexeme, literal, line or self.line))

    def _skip_whitespace_and_comments(self):
        while not self._at_end():
            ch = self._char()
            if ch in " \t\r\n":
                self._advance()
            elif ch == "/" and self._peek() == "/":
                while not self._at_end() and self._char() != "\n":
                    self._advance()
            else:
                break

    def _read_string(self):
        line = self.line
        self._advance()  # opening quote
        while not self._at_end() and self._char() != '"':
            self._advance()
        if self._at_end():
            self._error("Unterminated string.", line)
            return
        self._advance()  # closing quote
        value = self.source[self.start + 1 : self.pos - 1]
        self._add(TK.STRING, value, line)

    def _read_number(self):
        while _is_digit(self._char()):
            self._advance()
        # a trailing '.' belongs to a later get or call
        if self._char() == "." and _is_digit(self._peek()):
            self._advance()
            while _is_digit(self._char()):
                self._advance()
        self._add(TK.NUMBER, float(self.source[self.start : self.pos]))

    def _read_identifier(self):
        while _is_alpha(self._char()) or _is_digit(self._char()):
            self._advance()
        word = self.source[self.start : self.pos]
        self._add(KEYWORDS.get(word, TK.NAME))

    def _scan_tokens(self):
        while True:
            self._skip_whitespace_and_comments()
            self.start = self.pos
            if self._at_end():
                self.tokens.append(Token(TK.EOF, "", None, self.line))
                return

            ch = self._char()
            if ch == '"':
                self._read_string()
            elif _is_digit(ch):
                self._read_number()
            elif _is_alpha(ch):
                self._read_identifier()
            else:
                self._advance()
                if ch in _SINGLE:
                    self._add(_SINGLE[ch])
                elif ch in _WITH_EQUALS:
                    two, one = _WITH_EQUALS[ch]
                    self._add(two if self._match("=") else one)
                elif ch == "/":
                    self._add(TK.SLASH)
                else:
                    self._error("Unexpected character.")
