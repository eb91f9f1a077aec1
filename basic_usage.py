#!/usr/bin/env python3
"""
Basic usage examples for the tfpv_analysis package

This script walks through the reduction pipeline on the irreversible
Michaelis-Menten mechanism, one stage at a time.
"""

import logging

import sympy as sp

from tfpv_analysis import (
    TFPVCandidate,
    build_model,
    build_reduction,
    compute_variety,
    enumerate_candidates,
    extract_manifold,
    general_tfpv_ideal,
    is_saturation_trivial,
    michaelis_menten_model,
)


def example_1_build_model():
    """Define a model from a callable."""
    print("\n" + "=" * 50)
    print("Example 1: Building a Model")
    print("=" * 50)

    model = build_model(
        ["S", "C"],
        ["k1", "km1", "k2", "e0"],
        [True, True, True, True],
        lambda x, p: [
            -p[0] * p[3] * x[0] + (p[0] * x[0] + p[1]) * x[1],
            p[0] * p[3] * x[0] - (p[0] * x[0] + p[1] + p[2]) * x[1],
        ],
    )
    print("\n" + model.summary())

    # The same model ships as a built-in.
    print(f"\nMatches built-in: {model == michaelis_menten_model()}")


def example_2_candidates():
    """List the slow-fast separations that pass the rank test."""
    print("\n" + "=" * 50)
    print("Example 2: TFPV Candidates (s = 1)")
    print("=" * 50)

    model = michaelis_menten_model()
    for cand in enumerate_candidates(model, 1):
        print(f"  small: {cand.label}")


def example_3_quasi_steady_state():
    """The classical reduction for small total enzyme."""
    print("\n" + "=" * 50)
    print("Example 3: Small Enzyme Concentration")
    print("=" * 50)

    model = michaelis_menten_model()
    cand = TFPVCandidate.from_small(model, ["e0"])

    variety = compute_variety(model, cand, 1)
    for comp in variety.components:
        print(f"  {comp}")

    manifold, ok = extract_manifold(variety.components[0], model.state_variables, 1)
    print(f"\n  {manifold} (verified: {ok})")

    reduction = build_reduction(model, cand, manifold)
    for x, rhs in reduction.as_dict().items():
        print(f"  {x}' = {sp.factor(rhs)}")


def example_4_general_tfpvs():
    """All critical parameter values, as an elimination ideal."""
    print("\n" + "=" * 50)
    print("Example 4: General TFPVs")
    print("=" * 50)

    model = michaelis_menten_model()
    ideal = general_tfpv_ideal(model, 1)
    print(f"\n  {ideal}")
    print(f"  No TFPV with all parameters nonzero: {is_saturation_trivial(ideal)}")


def main():
    logging.basicConfig(level=logging.WARNING)
    example_1_build_model()
    example_2_candidates()
    example_3_quasi_steady_state()
    example_4_general_tfpvs()


if __name__ == "__main__":
    main()
