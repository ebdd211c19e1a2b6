from vpc.ast import Assignment, BinaryOp, If, Number, Print, Variable, collect_variables, iter_expressions
from vpc.parser import parse


def test_no_variables() -> None:
    assert collect_variables([]) == []
    assert collect_variables(parse("print(1 + 2)")) == []


def test_first_occurrence_order_without_duplicates() -> None:
    program = parse("""
    b = 1
    a = b
    b = 2
    if (a == 1) { c = 3 } else { d = 4 }
    print(c)
    a = 5
    """)
    assert collect_variables(program) == ["b", "a", "c", "d"]


def test_assignments_nested_in_branches() -> None:
    program = parse("if (x) { if (y) { inner = 1 } else { other = 2 } } else { outer = 3 }")
    assert collect_variables(program) == ["inner", "other", "outer"]


def test_reads_are_not_collected() -> None:
    program = [Print(Variable("ghost")), Assignment("x", Variable("y"))]
    assert collect_variables(program) == ["x"]


def test_iter_expressions_visits_every_expression() -> None:
    cond = BinaryOp(Variable("a"), "==", Number(1.0))
    stmt = If(cond, [Print(Variable("b"))], [Assignment("c", Number(2.0))])
    found = list(iter_expressions(stmt))
    assert found == [cond, Variable("a"), Number(1.0), Variable("b"), Number(2.0)]
