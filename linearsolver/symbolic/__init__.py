"""Symbolic modeling layer: expressions, named tensors, the model builder and lowering."""
