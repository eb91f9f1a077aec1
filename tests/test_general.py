import pytest
import sympy as sp

from tfpv_analysis import (
    general_tfpv_ideal,
    is_saturation_trivial,
    linear_exchange_model,
    transform_parameters,
)
from tfpv_analysis.general import contains_point


@pytest.fixture
def mm_general(mm):
    return general_tfpv_ideal(mm, 1)


def test_general_ideal_lives_in_parameter_ring(mm, mm_general):
    assert mm_general.variables == mm.parameters
    assert not mm_general.is_zero()
    sym = mm.symbols()
    assert mm_general.contains(sym["k1"] * sym["k2"] * sym["e0"])


def test_point_queries(mm_general):
    assert contains_point(mm_general, {"e0": 0})
    assert contains_point(mm_general, {"km1": 0, "k2": 0})
    assert not contains_point(mm_general, {"k1": 1, "km1": 1, "k2": 1, "e0": 1})
    with pytest.raises(ValueError):
        contains_point(mm_general, {"S": 0})


def test_saturation(mm, mm_general):
    # No TFPV with every parameter nonzero.
    assert is_saturation_trivial(mm_general)
    assert is_saturation_trivial(mm_general, mm.parameters)

    exchange = linear_exchange_model()
    ideal = general_tfpv_ideal(exchange, 1)
    assert ideal.is_zero()
    assert not is_saturation_trivial(ideal)


def test_aggregated_parameter(mm, mm_general):
    sym = mm.symbols()
    q = sp.Symbol("q")
    agg = transform_parameters(mm_general, [q], [sym["k1"] * sym["k2"] * sym["e0"]])
    assert agg.variables == (q,)
    assert agg.contains(q)

    named = transform_parameters(mm_general, ["q"], [sym["k1"] * sym["k2"] * sym["e0"]])
    assert named.contains(q)
