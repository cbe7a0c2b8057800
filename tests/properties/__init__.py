"""
Property-based testing using Hypothesis.

This package contains property tests that verify invariants hold across
randomly generated inputs.

Modules:
    test_point_set_properties: Range, reproducibility and stratification of point sets
    test_payoff_properties: Non-negativity, zero-volatility and strike monotonicity of payoffs
"""
