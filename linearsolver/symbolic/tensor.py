"""Named multi-dimensional tensors addressed by domain keys.

A ``NamedTensor`` holds a grid of values (typically decision variables or
coefficients) addressed by one key per dimension, e.g. ``flows["s", "A"]`` for
a flow network over node names. Each dimension has a declared, ordered key
domain. Storage may be sparse: key combinations that were never stored fall
back to a default value provider on lookup.

Lookups come in two forms, similar to NumPy indexing:

- ``get(*keys)`` / ``tensor[k1, k2]``: one exact key per dimension returns a
  single value.
- ``sub_tensor(*selectors)`` / ``tensor["i1"]`` / ``tensor[:, "j1"]``: exact
  keys collapse their dimension, ``ANY`` (or ``:``, or an omitted trailing
  position) preserves it. The result is a smaller tensor over the preserved
  dimensions.

Example:
    >>> tensor = NamedTensor(
    ...     [["i1", "i2"], ["j1", "j2"]],
    ...     {"i1": {"j1": 1}, "i2": {"j1": 3, "j2": 4}},
    ... )
    >>> tensor["i2", "j1"]
    3
    >>> tensor[:, "j1"].values
    {'i1': 1, 'i2': 3}
"""

import itertools
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Iterator, Mapping, Optional, Sequence, Tuple

from linearsolver.errors import AllDimensionsCollapsedError, InvalidKeyError


class _Leaf:
    __slots__ = ("value",)

    def __init__(self, value):
        self.value = value


class _Branch:
    __slots__ = ("children",)

    def __init__(self, children: Optional[Dict[Hashable, Any]] = None):
        self.children = children if children is not None else {}


@dataclass(frozen=True)
class Selector:
    """Per-dimension selector for ``NamedTensor.sub_tensor``.

    ``Selector.exact(key)`` collapses a dimension onto ``key``; ``ANY`` keeps the
    dimension with all of its stored keys. Plain keys passed to ``sub_tensor``
    are treated as exact selectors.
    """

    key: Any = None
    is_any: bool = False

    @classmethod
    def exact(cls, key) -> "Selector":
        return cls(key=key)

    def __repr__(self):
        return "ANY" if self.is_any else f"Selector.exact({self.key!r})"


ANY = Selector(is_any=True)


def cartesian_product(dimensions: Sequence[Sequence]) -> Iterator[Tuple]:
    """Enumerate all key tuples, depth-first in dimension order.

    Example:
        >>> list(cartesian_product([["a", "b"], [1, 2]]))
        [('a', 1), ('a', 2), ('b', 1), ('b', 2)]
    """
    return itertools.product(*dimensions)


class NamedTensor:
    """Multi-dimensional keyed container built once and read many times.

    Attributes:
        dimensions: Tuple of key domains, one ordered tuple per dimension
        default_value_provider: Called with the full key tuple when ``get`` finds
            no stored value. ``None`` makes missing values an ``InvalidKeyError``.
    """

    def __init__(
        self,
        dimensions: Sequence[Sequence],
        values: Optional[Mapping] = None,
        default_value_provider: Optional[Callable[[Tuple], Any]] = None,
        wildcard: Any = None,
    ):
        """Initialize a tensor from a nested mapping.

        Args:
            dimensions: One sequence of allowed keys per dimension
            values: Nested mapping ``{k1: {k2: ... {kn: value}}}``. May be sparse.
            default_value_provider: Fallback for key tuples without a stored value
            wildcard: Optional key value that ``sub_tensor`` treats like ``ANY``.
                It must not collide with any key of any dimension.

        Raises:
            ValueError: If there are no dimensions, a domain repeats a key, or the
                wildcard collides with a key
            InvalidKeyError: If ``values`` uses a key outside its dimension's domain
            TypeError: If ``values`` is not nested as deep as the dimensions
        """
        self._setup(dimensions, default_value_provider, wildcard)
        self._root = self._convert(values or {}, 0)

    @classmethod
    def from_provider(
        cls,
        dimensions: Sequence[Sequence],
        value_provider: Callable[[Tuple], Any],
        default_value_provider: Optional[Callable[[Tuple], Any]] = None,
        wildcard: Any = None,
    ) -> "NamedTensor":
        """Build a dense tensor with one ``value_provider(keys)`` call per key tuple.

        Key tuples are visited in ``cartesian_product`` order, so providers that
        create variables register them in a predictable order.

        Example:
            >>> NamedTensor.from_provider([[0, 1], ["a"]], lambda keys: keys).values
            {0: {'a': (0, 'a')}, 1: {'a': (1, 'a')}}
        """
        tensor = cls.__new__(cls)
        tensor._setup(dimensions, default_value_provider, wildcard)
        root = _Branch()
        for keys in cartesian_product(tensor._dimensions):
            node = root
            for key in keys[:-1]:
                node = node.children.setdefault(key, _Branch())
            node.children[keys[-1]] = _Leaf(value_provider(keys))
        tensor._root = root
        return tensor

    def _setup(self, dimensions, default_value_provider, wildcard):
        self._dimensions = tuple(tuple(domain) for domain in dimensions)
        if not self._dimensions:
            raise ValueError("A NamedTensor needs at least one dimension")
        self._domains = []
        for index, domain in enumerate(self._dimensions):
            keys = set(domain)
            if len(keys) != len(domain):
                raise ValueError(f"Dimension {index} repeats keys: {list(domain)!r}")
            if wildcard is not None and wildcard in keys:
                raise ValueError(
                    f"Wildcard {wildcard!r} collides with a key of dimension {index}; "
                    "use the ANY selector instead"
                )
            self._domains.append(keys)
        self.default_value_provider = default_value_provider
        self._wildcard = wildcard

    @classmethod
    def _from_root(cls, dimensions, root, default_value_provider, wildcard) -> "NamedTensor":
        tensor = cls.__new__(cls)
        tensor._setup(dimensions, default_value_provider, wildcard)
        tensor._root = root
        return tensor

    def _convert(self, values, depth: int):
        if depth == self.ndim:
            return _Leaf(values)
        if not isinstance(values, Mapping):
            raise TypeError(
                f"Expected a nested mapping at dimension {depth}, got {type(values).__name__}"
            )
        children = {}
        for key, value in values.items():
            self._check_key(depth, key)
            child = self._convert(value, depth + 1)
            # Empty branches hold no values
            if isinstance(child, _Branch) and not child.children:
                continue
            children[key] = child
        return _Branch(children)

    def _check_key(self, dimension: int, key):
        try:
            allowed = key in self._domains[dimension]
        except TypeError:
            allowed = False
        if not allowed:
            raise InvalidKeyError(
                f"Key {key!r} is not allowed in dimension {dimension}: {list(self._dimensions[dimension])!r}",
                key=key,
                dimension=dimension,
            )

    @property
    def dimensions(self) -> Tuple[Tuple, ...]:
        return self._dimensions

    @property
    def ndim(self) -> int:
        return len(self._dimensions)

    @property
    def shape(self) -> Tuple[int, ...]:
        return tuple(len(domain) for domain in self._dimensions)

    @property
    def wildcard(self):
        return self._wildcard

    def get(self, *keys):
        """Return the value stored at one exact key per dimension.

        Falls back to ``default_value_provider(keys)`` when the key tuple is
        valid but has no stored value.

        Raises:
            InvalidKeyError: If the number of keys differs from ``ndim``, a key is
                outside its dimension's domain, or the value is missing and there
                is no default value provider
        """
        if len(keys) != self.ndim:
            raise InvalidKeyError(
                f"The number of keys must be the same as the number of dimensions: "
                f"expected {self.ndim}, got {len(keys)} ({keys!r})",
                key=keys,
            )
        resolved = []
        for dimension, key in enumerate(keys):
            if isinstance(key, Selector):
                if key.is_any:
                    raise InvalidKeyError(
                        f"get() needs an exact key for dimension {dimension}; use sub_tensor() to keep it",
                        key=key,
                        dimension=dimension,
                    )
                key = key.key
            self._check_key(dimension, key)
            resolved.append(key)
        keys = tuple(resolved)

        node = self._root
        for key in keys:
            node = node.children.get(key)
            if node is None:
                break
        if isinstance(node, _Leaf):
            return node.value
        if self.default_value_provider is None:
            raise InvalidKeyError(f"No value stored for keys {keys!r}", key=keys)
        return self.default_value_provider(keys)

    def _is_any(self, selector) -> bool:
        if isinstance(selector, Selector):
            return selector.is_any
        if isinstance(selector, slice):
            return selector == slice(None)
        return self._wildcard is not None and selector == self._wildcard

    def _resolve(self, dimension: int, selector) -> Selector:
        if self._is_any(selector):
            return ANY
        if isinstance(selector, slice):
            raise InvalidKeyError(
                f"Only the full slice ':' can select dimension {dimension}, got {selector!r}",
                key=selector,
                dimension=dimension,
            )
        key = selector.key if isinstance(selector, Selector) else selector
        self._check_key(dimension, key)
        return Selector.exact(key)

    def sub_tensor(self, *selectors) -> "NamedTensor":
        """Reduce the tensor by collapsing some dimensions and preserving others.

        For each dimension ``i``: an exact key at position ``i`` collapses the
        dimension onto that key; ``ANY``, ``:``, the tensor's wildcard, or no
        selector at all (``i >= len(selectors)``) preserves it. Branches that
        end up empty are pruned; the default value provider is never consulted.

        Returns:
            NamedTensor: Tensor over the preserved dimensions, in original order.
            Its default value provider forwards to this tensor's provider with the
            collapsed keys filled back in.

        Raises:
            InvalidKeyError: If more selectors than dimensions are given or an
                exact key is outside its dimension's domain
            AllDimensionsCollapsedError: If no dimension is preserved

        Example:
            >>> tensor.sub_tensor("i1").values          # collapse the first dimension
            {'j1': 1}
            >>> tensor.sub_tensor(ANY, "j2").values     # keep the first, collapse the second
            {'i2': 4}
        """
        if len(selectors) > self.ndim:
            raise InvalidKeyError(
                f"Got {len(selectors)} selectors for a tensor with {self.ndim} dimensions",
                key=selectors,
            )
        resolved = [self._resolve(dimension, s) for dimension, s in enumerate(selectors)]
        resolved += [ANY] * (self.ndim - len(resolved))

        kept = [dimension for dimension, s in enumerate(resolved) if s.is_any]
        if not kept:
            raise AllDimensionsCollapsedError(
                f"Selectors {selectors!r} collapse every dimension; use get() to read a single value",
                key=selectors,
            )

        root = self._reduce(self._root, resolved, 0)
        return NamedTensor._from_root(
            [self._dimensions[dimension] for dimension in kept],
            root if root is not None else _Branch(),
            self._reduced_default(resolved),
            self._wildcard,
        )

    def _reduce(self, node, resolved, depth):
        if isinstance(node, _Leaf):
            return node
        selector = resolved[depth]
        if not selector.is_any:
            child = node.children.get(selector.key)
            if child is None:
                return None
            return self._reduce(child, resolved, depth + 1)

        children = {}
        for key in self._dimensions[depth]:
            if key not in node.children:
                continue
            reduced = self._reduce(node.children[key], resolved, depth + 1)
            if reduced is not None:
                children[key] = reduced
        return _Branch(children) if children else None

    def _reduced_default(self, resolved):
        provider = self.default_value_provider
        if provider is None:
            return None

        def reduced_provider(keys):
            remaining = iter(keys)
            return provider(tuple(next(remaining) if s.is_any else s.key for s in resolved))

        return reduced_provider

    def __getitem__(self, item):
        keys = item if isinstance(item, tuple) else (item,)
        if len(keys) == self.ndim and not any(self._is_any(k) for k in keys):
            return self.get(*keys)
        return self.sub_tensor(*keys)

    @property
    def values(self) -> Dict:
        """Stored values as a nested plain ``dict``."""
        return _to_plain(self._root)

    def items(self) -> Iterator[Tuple[Tuple, Any]]:
        """Yield ``(key_tuple, value)`` for every stored value, depth-first."""
        yield from _walk(self._root, ())

    def __iter__(self):
        for _, value in self.items():
            yield value

    def __len__(self):
        return sum(1 for _ in self.items())

    def __contains__(self, keys):
        keys = keys if isinstance(keys, tuple) else (keys,)
        if len(keys) != self.ndim:
            return False
        node = self._root
        for key in keys:
            try:
                node = node.children.get(key)
            except TypeError:
                return False
            if node is None:
                return False
        return isinstance(node, _Leaf)

    def __repr__(self):
        return f"NamedTensor(shape={self.shape}, stored={len(self)})"


def _to_plain(node):
    if isinstance(node, _Leaf):
        return node.value
    return {key: _to_plain(child) for key, child in node.children.items()}


def _walk(node, prefix):
    if isinstance(node, _Leaf):
        yield prefix, node.value
        return
    for key, child in node.children.items():
        yield from _walk(child, prefix + (key,))
