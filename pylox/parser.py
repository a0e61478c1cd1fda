from __future__ import annotations
from .scanner import TK, Token
from .errors import LoxSyntaxError
from . import ast_nodes as ast


MAX_ARGS = 255

# Operator precedence for binary operators (higher = tighter), all left-associative
_BINARY_OPS: dict[TK, int] = {
    TK.OR:    1,
    TK.AND:   2,
    TK.EQ:    3,
    TK.NEQ:   3,
    TK.GT:    4,
    TK.GE:    4,
    TK.LT:    4,
    TK.LE:    4,
    TK.PLUS:  5,
    TK.MINUS: 5,
    TK.STAR:  6,
    TK.SLASH: 6,
}

_STATEMENT_STARTS = (
    TK.CLASS, TK.FUN, TK.VAR, TK.FOR, TK.IF, TK.WHILE, TK.PRINT, TK.RETURN,
)


class ParseError(Exception):
    """Unwinds to the enclosing declaration, which then synchronizes."""


class Parser:
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0
        self.errors: list[LoxSyntaxError] = []

    # ---- helpers ----

    def _cur(self) -> Token:
        return self.tokens[self.pos]

    def _previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def _peek_kind(self) -> TK:
        return self.tokens[self.pos].kind

    def _at_end(self) -> bool:
        return self._peek_kind() == TK.EOF

    def _check(self, kind: TK) -> bool:
        return self._peek_kind() == kind

    def _advance(self) -> Token:
        tok = self._cur()
        if not self._at_end():
            self.pos += 1
        return tok

    def _match(self, *kinds: TK) -> Token | None:
        if self._peek_kind() in kinds:
            return self._advance()
        return None

    def _expect(self, kind: TK, msg: str) -> Token:
        tok = self._match(kind)
        if tok is None:
            raise self._error(self._cur(), msg)
        return tok

    def _error(self, token: Token, msg: str) -> ParseError:
        self.errors.append(LoxSyntaxError.at(token, msg))
        return ParseError(msg)

    def _synchronize(self):
        self._advance()
        while not self._at_end():
            if self._previous().kind == TK.SEMICOLON:
                return
            if self._peek_kind() in _STATEMENT_STARTS:
                return
            self._advance()

    # ---- top-level ----

    def parse(self) -> list:
        statements: list = []
        while not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    def parse_expression(self):
        """Parse a single expression that must span the whole token list."""
        try:
            expr = self._parse_expression()
            self._expect(TK.EOF, "Expect end of expression.")
            return expr
        except ParseError:
            return None

    # ---- declarations ----

    def _declaration(self):
        try:
            if self._match(TK.CLASS):
                return self._class_declaration()
            if self._match(TK.FUN):
                return self._function("function")
            if self._match(TK.VAR):
                return self._var_declaration()
            return self._statement()
        except ParseError:
            self._synchronize()
            return None

    def _class_declaration(self) -> ast.Class:
        name = self._expect(TK.NAME, "Expect class name.")

        superclass = None
        if self._match(TK.LT):
            super_name = self._expect(TK.NAME, "Expect superclass name.")
            superclass = ast.Variable(super_name)

        self._expect(TK.LBRACE, "Expect '{' before class body.")
        methods: list[ast.Function] = []
        while not self._check(TK.RBRACE) and not self._at_end():
            methods.append(self._function("method"))
        self._expect(TK.RBRACE, "Expect '}' after class body.")
        return ast.Class(name, superclass, methods)

    def _function(self, kind: str) -> ast.Function:
        name = self._expect(TK.NAME, f"Expect {kind} name.")
        self._expect(TK.LPAREN, f"Expect '(' after {kind} name.")
        params: list[Token] = []
        if not self._check(TK.RPAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self._error(self._cur(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self._expect(TK.NAME, "Expect parameter name."))
                if not self._match(TK.COMMA):
                    break
        self._expect(TK.RPAREN, "Expect ')' after parameters.")
        self._expect(TK.LBRACE, f"Expect '{{' before {kind} body.")
        body = self._block()
        return ast.Function(name, params, body)

    def _var_declaration(self) -> ast.Var:
        name = self._expect(TK.NAME, "Expect variable name.")
        initializer = None
        if self._match(TK.ASSIGN):
            initializer = self._parse_expression()
        self._expect(TK.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    # ---- statements ----

    def _statement(self):
        if self._match(TK.FOR):
            return self._for_statement()
        if self._match(TK.IF):
            return self._if_statement()
        if self._match(TK.PRINT):
            return self._print_statement()
        if self._match(TK.RETURN):
            return self._return_statement()
        if self._match(TK.WHILE):
            return self._while_statement()
        if self._match(TK.LBRACE):
            return ast.Block(self._block())
        return self._expression_statement()

    def _for_statement(self):
        """Desugar `for (init; cond; incr) body` into a while loop in a block."""
        self._expect(TK.LPAREN, "Expect '(' after 'for'.")

        if self._match(TK.SEMICOLON):
            initializer = None
        elif self._match(TK.VAR):
            initializer = self._var_declaration()
        else:
            initializer = self._expression_statement()

        condition = None
        if not self._check(TK.SEMICOLON):
            condition = self._parse_expression()
        self._expect(TK.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self._check(TK.RPAREN):
            increment = self._parse_expression()
        self._expect(TK.RPAREN, "Expect ')' after for clauses.")

        body = self._statement()

        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block([initializer, body])
        return body

    def _if_statement(self) -> ast.If:
        self._expect(TK.LPAREN, "Expect '(' after 'if'.")
        condition = self._parse_expression()
        self._expect(TK.RPAREN, "Expect ')' after if condition.")

        then_branch = self._statement()
        else_branch = None
        if self._match(TK.ELSE):
            else_branch = self._statement()
        return ast.If(condition, then_branch, else_branch)

    def _print_statement(self) -> ast.Print:
        value = self._parse_expression()
        self._expect(TK.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def _return_statement(self) -> ast.Return:
        keyword = self._previous()
        value = None
        if not self._check(TK.SEMICOLON):
            value = self._parse_expression()
        self._expect(TK.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def _while_statement(self) -> ast.While:
        self._expect(TK.LPAREN, "Expect '(' after 'while'.")
        condition = self._parse_expression()
        self._expect(TK.RPAREN, "Expect ')' after condition.")
        body = self._statement()
        return ast.While(condition, body)

    def _block(self) -> list:
        statements: list = []
        while not self._check(TK.RBRACE) and not self._at_end():
            stmt = self._declaration()
            if stmt is not None:
                statements.append(stmt)
        self._expect(TK.RBRACE, "Expect '}' after block.")
        return statements

    def _expression_statement(self) -> ast.Expression:
        expr = self._parse_expression()
        self._expect(TK.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr)

    # ---- expressions ----

    def _parse_expression(self):
        return self._assignment()

    def _assignment(self):
        expr = self._binary()

        equals = self._match(TK.ASSIGN)
        if equals is None:
            return expr

        value = self._assignment()
        if isinstance(expr, ast.Variable):
            return ast.Assign(expr.name, value)
        if isinstance(expr, ast.Get):
            return ast.Set(expr.obj, expr.name, value)

        # reported without raising; parsing continues
        self._error(equals, "Invalid assignment target.")
        return expr

    def _binary(self, min_prec: int = 1):
        left = self._unary()

        while True:
            k = self._peek_kind()
            prec = _BINARY_OPS.get(k)
            if prec is None or prec < min_prec:
                break
            op_tok = self._advance()
            right = self._binary(prec + 1)
            if k in (TK.AND, TK.OR):
                left = ast.Logical(left, op_tok, right)
            else:
                left = ast.Binary(left, op_tok, right)

        return left

    def _unary(self):
        op_tok = self._match(TK.BANG, TK.MINUS)
        if op_tok is not None:
            return ast.Unary(op_tok, self._unary())
        return self._call()

    def _call(self):
        expr = self._primary()
        while True:
            if self._match(TK.LPAREN):
                expr = self._finish_call(expr)
            elif self._match(TK.DOT):
                name = self._expect(TK.NAME, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break
        return expr

    def _finish_call(self, callee) -> ast.Call:
        args: list = []
        if not self._check(TK.RPAREN):
            while True:
                if len(args) >= MAX_ARGS:
                    self._error(self._cur(), f"Can't have more than {MAX_ARGS} arguments.")
                args.append(self._parse_expression())
                if not self._match(TK.COMMA):
                    break
        paren = self._expect(TK.RPAREN, "Expect ')' after arguments.")
        return ast.Call(callee, paren, args)

    def _primary(self):
        tok = self._cur()
        k = tok.kind
        if k == TK.FALSE:
            self._advance()
            return ast.Literal(False)
        if k == TK.TRUE:
            self._advance()
            return ast.Literal(True)
        if k == TK.NIL:
            self._advance()
            return ast.Literal(None)
        if k in (TK.NUMBER, TK.STRING):
            self._advance()
            return ast.Literal(tok.literal)
        if k == TK.SUPER:
            self._advance()
            self._expect(TK.DOT, "Expect '.' after 'super'.")
            method = self._expect(TK.NAME, "Expect superclass method name.")
            return ast.Super(tok, method)
        if k == TK.THIS:
            self._advance()
            return ast.This(tok)
        if k == TK.NAME:
            self._advance()
            return ast.Variable(tok)
        if k == TK.LPAREN:
            self._advance()
            expr = self._parse_expression()
            self._expect(TK.RPAREN, "Expect ')' after expression.")
            return ast.Grouping(expr)
        raise self._error(tok, "Expect expression.")
