import io
import math
import pytest
from pylox import LoxSession, LoxRuntimeError, LoxStaticError


def lox(code: str) -> str:
    """Helper: execute code, return stdout."""
    s = LoxSession()
    return s.execute(code)


def lox_eval(expr: str):
    """Helper: evaluate expression, return Python value."""
    s = LoxSession()
    return s.eval(expr)


def runtime_error(code: str) -> LoxRuntimeError:
    with pytest.raises(LoxRuntimeError) as exc:
        lox(code)
    return exc.value


# ===================== LITERALS =====================

class TestLiterals:
    def test_nil(self):
        assert lox_eval("nil") is None

    def test_true(self):
        assert lox_eval("true") is True

    def test_false(self):
        assert lox_eval("false") is False

    def test_number_is_float(self):
        assert lox_eval("42") == 42.0
        assert isinstance(lox_eval("42"), float)

    def test_string(self):
        assert lox_eval('"hello"') == "hello"


# ===================== ARITHMETIC =====================

class TestArithmetic:
    def test_precedence(self):
        assert lox_eval("1 + 2 * 3") == 7

    def test_grouping(self):
        assert lox_eval("(1 + 2) * 3") == 9

    def test_sub_left_assoc(self):
        assert lox_eval("10 - 3 - 2") == 5

    def test_div(self):
        assert lox_eval("10 / 4") == 2.5

    def test_div_by_zero(self):
        assert lox_eval("1 / 0") == math.inf
        assert lox_eval("-1 / 0") == -math.inf
        assert math.isnan(lox_eval("0 / 0"))

    def test_unary_minus(self):
        assert lox_eval("-(3 + 2)") == -5

    def test_string_concat(self):
        assert lox_eval('"foo" + "bar"') == "foobar"

    def test_mixed_plus_is_error(self):
        err = runtime_error('print "a" + 1;')
        assert err.message == "Operands must be two numbers or two strings."
        assert err.token.lexeme == "+"

    def test_minus_on_string_is_error(self):
        err = runtime_error('print "a" - "b";')
        assert err.message == "Operands must be numbers."

    def test_negate_string_is_error(self):
        err = runtime_error('print -"a";')
        assert err.message == "Operand must be a number."

    def test_comparison_requires_numbers(self):
        err = runtime_error('print "a" < "b";')
        assert err.message == "Operands must be numbers."
        assert err.report() == "[line 1] Error at '<': Operands must be numbers."


# ===================== COMPARISON & EQUALITY =====================

class TestComparison:
    @pytest.mark.parametrize("expr,expected", [
        ("1 < 2", True), ("2 <= 2", True), ("3 > 2", True),
        ("3 >= 4", False), ("1 == 1", True), ("1 != 2", True),
    ])
    def test_numbers(self, expr, expected):
        assert lox_eval(expr) is expected

    def test_nil_equals_only_nil(self):
        assert lox_eval("nil == nil") is True
        assert lox_eval("nil == false") is False
        assert lox_eval("false == nil") is False

    def test_strings_by_value(self):
        assert lox_eval('"ab" == "a" + "b"') is True

    def test_cross_type_never_equal(self):
        assert lox_eval('1 == "1"') is False
        assert lox_eval("1 == true") is False
        assert lox_eval("0 == false") is False

    def test_instances_by_identity(self):
        out = lox("class A {} var a = A(); var b = A(); print a == a; print a == b;")
        assert out == "true\nfalse"


# ===================== TRUTHINESS & LOGIC =====================

class TestLogical:
    def test_not(self):
        assert lox_eval("!nil") is True
        assert lox_eval("!0") is False
        assert lox_eval('!""') is False

    def test_zero_and_empty_string_are_truthy(self):
        assert lox('if (0) print "yes"; if ("") print "also";') == "yes\nalso"

    def test_or_returns_operand(self):
        assert lox_eval('nil or "x"') == "x"
        assert lox_eval('1 or "x"') == 1

    def test_and_returns_operand(self):
        assert lox_eval("nil and 1") is None
        assert lox_eval("1 and 2") == 2

    def test_short_circuit(self):
        code = """
        var called = false;
        fun touch() { called = true; return true; }
        var r = false and touch();
        print called;
        r = true or touch();
        print called;
        """
        assert lox(code) == "false\nfalse"


# ===================== VARIABLES & SCOPE =====================

class TestVariables:
    def test_global(self):
        assert lox("var a = 1; a = a + 1; print a;") == "2"

    def test_uninitialized_is_nil(self):
        assert lox("var a; print a;") == "nil"

    def test_assignment_is_expression(self):
        assert lox("var a; var b; a = b = 3; print a; print b;") == "3\n3"

    def test_undefined_variable(self):
        err = runtime_error("print nope;")
        assert err.message == "Undefined variable 'nope'."

    def test_assign_undefined_variable(self):
        err = runtime_error("nope = 1;")
        assert err.message == "Undefined variable 'nope'."

    def test_global_self_initializer_reads_previous_value(self):
        assert lox("var a = 1; var a = a + 1; print a;") == "2"

    def test_shadowing_restores_outer(self):
        code = """
        var a = "outer";
        {
          var a = "inner";
          print a;
        }
        print a;
        """
        assert lox(code) == "inner\nouter"

    def test_block_assignment_mutates_outer(self):
        assert lox("var a = 1; { a = 2; } print a;") == "2"

    def test_static_scope_for_closures(self):
        code = """
        var a = "global";
        {
          fun showA() { print a; }
          showA();
          var a = "block";
          showA();
        }
        """
        assert lox(code) == "global\nglobal"


# ===================== CONTROL FLOW =====================

class TestControlFlow:
    def test_if_else(self):
        assert lox('if (1 > 2) print "a"; else print "b";') == "b"

    def test_while(self):
        assert lox("var i = 0; while (i < 3) { print i; i = i + 1; }") == "0\n1\n2"

    def test_for(self):
        assert lox("for (var i = 0; i < 3; i = i + 1) print i;") == "0\n1\n2"

    def test_for_variable_is_scoped(self):
        with pytest.raises(LoxRuntimeError):
            lox("for (var i = 0; i < 1; i = i + 1) {} print i;")

    def test_for_without_clauses_exits_via_return(self):
        code = """
        fun f() { var n = 0; for (;;) { n = n + 1; if (n == 5) return n; } }
        print f();
        """
        assert lox(code) == "5"

    def test_fibonacci_loop(self):
        code = """
        var a = 0; var temp;
        for (var b = 1; a < 50; b = temp + b) { print a; temp = a; a = b; }
        """
        assert lox(code).split("\n") == ["0", "1", "1", "2", "3", "5", "8", "13", "21", "34"]


# ===================== FUNCTIONS =====================

class TestFunctions:
    def test_call(self):
        assert lox("fun add(a, b) { return a + b; } print add(1, 2);") == "3"

    def test_implicit_nil_return(self):
        assert lox("fun f() {} print f();") == "nil"

    def test_bare_return(self):
        assert lox("fun f() { return; print 1; } print f();") == "nil"

    def test_recursion(self):
        code = "fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); } print fib(15);"
        assert lox(code) == "610"

    def test_return_unwinds_nested_blocks_and_loops(self):
        code = """
        fun find() {
          var i = 0;
          while (true) { { if (i == 3) return i; } i = i + 1; }
        }
        print find();
        """
        assert lox(code) == "3"

    def test_print_function(self):
        assert lox("fun f() {} print f;") == "<fn f>"

    def test_print_native(self):
        assert lox("print clock;") == "<native fn>"

    def test_arity_too_few(self):
        err = runtime_error("fun f(a) {} f();")
        assert err.message == "Expected 1 arguments but got 0."

    def test_arity_too_many(self):
        err = runtime_error("fun f(a) {} f(1, 2);")
        assert err.message == "Expected 1 arguments but got 2."
        assert err.token.lexeme == ")"

    def test_call_non_callable(self):
        err = runtime_error("var x = 3; x();")
        assert err.message == "Can only call functions and classes."

    def test_call_string(self):
        err = runtime_error('"not a function"();')
        assert err.message == "Can only call functions and classes."

    def test_arguments_evaluated_before_arity_check(self):
        code = "fun f(a) {} var n = 0; fun g() { n = n + 1; return n; }"
        s = LoxSession()
        s.execute(code)
        with pytest.raises(LoxRuntimeError):
            s.execute("f(g(), g());")
        assert s.get("n") == 2


# ===================== CLOSURES =====================

class TestClosures:
    def test_counter(self):
        code = """
        fun makeCounter() { var i = 0; fun inc() { i = i + 1; return i; } return inc; }
        var c = makeCounter();
        print c();
        print c();
        """
        assert lox(code) == "1\n2"

    def test_independent_counters(self):
        code = """
        fun makeCounter() { var i = 0; fun inc() { i = i + 1; return i; } return inc; }
        var a = makeCounter(); var b = makeCounter();
        a(); a();
        print a();
        print b();
        """
        assert lox(code) == "3\n1"

    def test_shared_environment(self):
        code = """
        var get; var set;
        {
          var x = "before";
          fun g() { return x; }
          fun s(v) { x = v; }
          get = g; set = s;
        }
        set("after");
        print get();
        """
        assert lox(code) == "after"

    def test_closure_outlives_block(self):
        code = """
        var f;
        { var local = "captured"; fun show() { print local; } f = show; }
        f();
        """
        assert lox(code) == "captured"


# ===================== CLASSES =====================

class TestClasses:
    def test_print_class_and_instance(self):
        assert lox("class Bagel {} print Bagel; print Bagel();") == "Bagel\nBagel instance"

    def test_fields(self):
        assert lox("class P {} var p = P(); p.x = 1; p.y = 2; print p.x + p.y;") == "3"

    def test_set_returns_value(self):
        assert lox("class P {} var p = P(); print p.x = 5;") == "5"

    def test_method_and_this(self):
        code = """
        class Cake {
          taste() { var adjective = "delicious"; print "The " + this.flavor + " cake is " + adjective + "!"; }
        }
        var cake = Cake();
        cake.flavor = "German chocolate";
        cake.taste();
        """
        assert lox(code) == "The German chocolate cake is delicious!"

    def test_initializer(self):
        code = """
        class Point { init(x, y) { this.x = x; this.y = y; } sum() { return this.x + this.y; } }
        print Point(3, 4).sum();
        """
        assert lox(code) == "7"

    def test_initializer_arity(self):
        err = runtime_error("class P { init(a) {} } P();")
        assert err.message == "Expected 1 arguments but got 0."

    def test_class_without_init_takes_no_arguments(self):
        err = runtime_error("class P {} P(1);")
        assert err.message == "Expected 0 arguments but got 1."

    def test_init_bare_return_yields_instance(self):
        code = """
        class Foo { init() { this.ok = true; return; this.ok = false; } }
        var f = Foo();
        print f;
        print f.ok;
        """
        assert lox(code) == "Foo instance\ntrue"

    def test_calling_init_directly_returns_this(self):
        code = "class Foo { init() {} } var f = Foo(); print f.init() == f;"
        assert lox(code) == "true"

    def test_return_value_in_init_is_static_error(self):
        with pytest.raises(LoxStaticError) as exc:
            lox("class Foo { init() { return 1; } }")
        assert exc.value.errors[0].message == "Can't return a value from an initializer."

    def test_field_shadows_method(self):
        code = """
        class A { m() { return "method"; } }
        var a = A();
        a.m = "field";
        print a.m;
        """
        assert lox(code) == "field"

    def test_bound_method_remembers_instance(self):
        code = """
        class Person { init(n) { this.name = n; } sayName() { print this.name; } }
        var jane = Person("Jane");
        var bill = Person("Bill");
        bill.sayName = jane.sayName;
        bill.sayName();
        """
        assert lox(code) == "Jane"

    def test_method_binding_not_cached(self):
        assert lox("class A { m() {} } var a = A(); print a.m == a.m;") == "false"

    def test_class_refers_to_itself(self):
        code = "class A { make() { return A(); } } print A().make();"
        assert lox(code) == "A instance"

    def test_undefined_property(self):
        err = runtime_error("class A {} A().nope;")
        assert err.message == "Undefined property 'nope'."

    def test_property_on_non_instance(self):
        err = runtime_error('"str".length;')
        assert err.message == "Only instances have properties."

    def test_field_on_non_instance(self):
        err = runtime_error("var n = 1; n.x = 2;")
        assert err.message == "Only instances have fields."


# ===================== INHERITANCE =====================

class TestInheritance:
    def test_inherited_method(self):
        code = "class A { hi() { return \"hi\"; } } class B < A {} print B().hi();"
        assert lox(code) == "hi"

    def test_super_call(self):
        code = """
        class A { greet() { return "A"; } }
        class B < A { greet() { return super.greet() + "B"; } }
        print B().greet();
        """
        assert lox(code) == "AB"

    def test_super_keeps_original_receiver(self):
        code = """
        class A { name() { return this.n; } }
        class B < A { init() { this.n = "bee"; } name() { return "B:" + super.name(); } }
        print B().name();
        """
        assert lox(code) == "B:bee"

    def test_super_resolves_statically(self):
        code = """
        class A { method() { print "A method"; } }
        class B < A { method() { print "B method"; } test() { super.method(); } }
        class C < B {}
        C().test();
        """
        assert lox(code) == "A method"

    def test_inherited_initializer(self):
        code = """
        class A { init(v) { this.v = v; } }
        class B < A {}
        print B(5).v;
        """
        assert lox(code) == "5"

    def test_super_init_chain(self):
        code = """
        class A { init(v) { this.v = v; } }
        class B < A { init() { super.init(9); this.w = 1; } }
        var b = B();
        print b.v + b.w;
        """
        assert lox(code) == "10"

    def test_undefined_super_method(self):
        code = """
        class A {}
        class B < A { m() { return super.missing(); } }
        B().m();
        """
        err = runtime_error(code)
        assert err.message == "Undefined property 'missing'."

    def test_superclass_must_be_class(self):
        err = runtime_error('var NotAClass = "x"; class B < NotAClass {}')
        assert err.message == "Superclass must be a class."
        assert err.token.lexeme == "NotAClass"

    def test_bound_super_method_value(self):
        code = """
        class A { m() { return "A.m on " + this.tag; } }
        class B < A { get() { return super.m; } }
        var b = B(); b.tag = "b";
        var f = b.get();
        print f();
        """
        assert lox(code) == "A.m on b"


# ===================== STRINGIFY =====================

class TestStringify:
    @pytest.mark.parametrize("expr,expected", [
        ("4.0", "4"), ("4.5", "4.5"), ("nil", "nil"), ("true", "true"),
        ("false", "false"), ("-0", "-0"), ("1 / 3", "0.3333333333333333"),
        ("1 / 0", "inf"), ("-1 / 0", "-inf"), ('"text"', "text"),
        ("123456789012", "123456789012"),
        ("100000000000000000000", "100000000000000000000"),
        ("1000000 * 1000000 * 1000000", "1000000000000000000"),
        ("-1000000 * 1000000 * 1000000", "-1000000000000000000"),
        ("1000000000000000000000", "1e+21"),
        ("0.1 + 0.2", "0.30000000000000004"),
    ])
    def test_print(self, expr, expected):
        assert lox(f"print {expr};") == expected


# ===================== RUNTIME ERROR BEHAVIOR =====================

class TestRuntimeErrors:
    def test_error_halts_remaining_statements(self):
        s = LoxSession()
        with pytest.raises(LoxRuntimeError):
            s.execute('print "before"; print nope; print "after";')
        assert s.output == ["before"]

    def test_error_line(self):
        err = runtime_error("var a = 1;\n\nprint a + nil;")
        assert err.token.line == 3
        assert err.report() == "[line 3] Error at '+': Operands must be two numbers or two strings."

    def test_error_inside_function_reports_inner_token(self):
        err = runtime_error("fun f() {\n  return -\"x\";\n}\nf();")
        assert err.token.line == 2

    def test_interpreter_survives_error(self):
        s = LoxSession()
        with pytest.raises(LoxRuntimeError):
            s.execute("var a = 1; a();")
        assert s.execute("print a;") == "1"

    def test_max_call_depth(self):
        s = LoxSession(max_call_depth=50)
        with pytest.raises(LoxRuntimeError) as exc:
            s.execute("fun f(n) { return f(n + 1); } f(0);")
        assert exc.value.message == "Stack overflow."
        assert s.interpreter.call_depth == 0

    def test_unbounded_recursion_is_a_runtime_error(self):
        s = LoxSession()
        with pytest.raises(LoxRuntimeError) as exc:
            s.execute("fun f(n) { return f(n + 1); } f(0);")
        assert exc.value.message == "Stack overflow."
        assert exc.value.report() == "[line 1] Error at ')': Stack overflow."
        assert s.interpreter.call_depth == 0

    def test_session_survives_stack_overflow(self):
        s = LoxSession()
        assert s.run("fun f() { f(); } f();") == ["[line 1] Error at ')': Stack overflow."]
        assert s.had_runtime_error
        assert s.execute("fun c(n) { if (n == 0) return 0; return 1 + c(n - 1); } print c(50);") == "50"

    def test_method_recursion_overflow(self):
        err = runtime_error("class A { m() { return this.m(); } } A().m();")
        assert err.message == "Stack overflow."


# ===================== NATIVES =====================

class TestNatives:
    def test_clock(self):
        s = LoxSession()
        assert isinstance(s.eval("clock()"), float)
        assert s.execute("var t = clock(); print clock() >= t;") == "true"

    def test_read_line(self):
        s = LoxSession(stdin=io.StringIO("first\nsecond\n"))
        assert s.execute("print readLine(); print readLine();") == "first\nsecond"

    def test_read_line_at_end_of_input(self):
        s = LoxSession(stdin=io.StringIO(""))
        assert s.execute('print readLine() == "";') == "true"

    def test_native_arity(self):
        err = runtime_error("clock(1);")
        assert err.message == "Expected 0 arguments but got 1."
