import pytest
import sympy as sp

from tfpv_analysis import AlgebraError, PolynomialIdeal
from tfpv_analysis.algebra import is_identically_zero, jacobian_minors


x, y, t, q, a = sp.symbols("x y t q a")


def ideal(*gens, variables=(x, y), coefficients=()):
    return PolynomialIdeal.from_generators(gens, variables, coefficient_symbols=coefficients)


def test_from_generators_drops_zeros_and_duplicates():
    I = ideal(x * y, 0, x * y, x + 0)
    assert I.generators == (x * y, x)


def test_dimension():
    assert ideal(x * y).dimension() == 1
    assert ideal(x, y).dimension() == 0
    assert ideal(sp.Integer(1)).dimension() == -1
    assert ideal().dimension() == 2


def test_unit_and_membership():
    assert ideal(x, x - 1).is_unit()
    assert not ideal(x * y).is_unit()
    assert ideal(x, y).contains(x**2 + 3 * y)
    assert not ideal(x * y).contains(x)
    assert ideal().contains(0)
    assert not ideal().contains(x)


def test_coefficient_symbols_are_field_elements():
    I = ideal(a * x - 1, variables=(x,), coefficients=(a,))
    assert not I.is_unit()
    assert I.contains(x - 1 / a)
    assert I.dimension() == 0


def test_decompose_splits_products_and_radicalizes():
    comps = ideal(x * y).decompose()
    assert [c.generators for c in comps] == [(x,), (y,)]
    assert all(c.dimension() == 1 for c in comps)

    comps = ideal(x**2).decompose()
    assert len(comps) == 1 and comps[0].generators == (x,)


def test_decompose_removes_embedded_and_orders_by_dimension():
    comps = ideal(x * (y - 1), y * (y - 1)).decompose()
    assert [c.dimension() for c in comps] == [1, 0]
    assert comps[0].equals(ideal(y - 1))
    assert comps[1].equals(ideal(x, y))


def test_decompose_of_unit_ideal_is_empty():
    assert ideal(x, x - 1).decompose() == []


def test_eliminate():
    I = PolynomialIdeal.from_generators([x - t, y - t**2], (t, x, y))
    J = I.eliminate([t])
    assert J.variables == (x, y)
    assert J.contains(y - x**2)


def test_saturate():
    I = ideal(x * y)
    assert I.saturate(x).contains(y)
    assert not I.saturation_is_unit(x)
    assert ideal(x).saturation_is_unit(x)


def test_preimage():
    I = ideal(x - 1, variables=(x,))
    P = I.preimage([q], [x**2])
    assert P.variables == (q,)
    assert P.contains(q - 1)


def test_preimage_rejects_bad_arguments():
    I = ideal(x - 1, variables=(x,))
    with pytest.raises(ValueError):
        I.preimage([q, t], [x])
    with pytest.raises(ValueError):
        I.preimage([x], [x**2])


def test_substitute_moves_to_smaller_ring():
    I = ideal(x * y - a, coefficients=(a,))
    J = I.substitute({y: 1})
    assert J.variables == (x,)
    assert J.contains(x - a)


def test_non_polynomial_generator_raises_algebra_error():
    with pytest.raises(AlgebraError):
        ideal(1 / x).groebner_basis()


def test_jacobian_minors():
    J = sp.Matrix([[x, y], [2 * x, 2 * y]])
    assert jacobian_minors(J, 0) == [1]
    assert jacobian_minors(J, 2) == []
    assert jacobian_minors(J, 3) == []
    # x and -x style duplicates collapse.
    ones = jacobian_minors(sp.Matrix([[x, -x]]), 1)
    assert ones == [x]


def test_is_identically_zero():
    assert is_identically_zero((x + 1) ** 2 - x**2 - 2 * x - 1)
    assert is_identically_zero(x / (x + 1) - 1 + 1 / (x + 1))
    assert not is_identically_zero(x)


def test_str():
    assert str(ideal()) == "<0>"
    assert str(ideal(x, y)) == "<x, y>"


def test_decompose_separates_curves_hidden_in_an_irreducible_basis():
    z = sp.Symbol("z")
    I = ideal(x**3 + x**2 * y - x * y - z, y**2 - z, variables=(x, y, z))
    comps = I.decompose()

    assert [c.dimension() for c in comps] == [1, 1]
    line = [c for c in comps if c.contains(x + y)]
    graph = [c for c in comps if c.contains(y - x**2)]
    assert len(line) == 1 and len(graph) == 1
    assert line[0].contains(z - y**2) and not line[0].contains(y - x**2)
    assert graph[0].contains(z - x**4) and not graph[0].contains(x + y)


def test_decompose_keeps_a_prime_with_irreducible_eliminant():
    comps = ideal(x**2 + y**2 - 1).decompose()
    assert len(comps) == 1
    assert comps[0].equals(ideal(x**2 + y**2 - 1))


def test_groebner_cache_is_bounded():
    from tfpv_analysis.algebra import _groebner

    assert _groebner.cache_info().maxsize is not None
