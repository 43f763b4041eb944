"""Backend lowerers translating compiled models into CVXPY problems and JAX functions."""
