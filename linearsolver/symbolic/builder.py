"""Model builder: variable registry, constraints, objective and compilation.

``ModelBuilder`` is the mutable front half of the package. Variables are
declared on it, constraints and an objective are registered against those
variables, and ``build()`` validates the model and returns an immutable
``CompiledModel`` that can be handed to any backend.

Example:
    Maximize ``x + 10 y`` subject to two constraints::

        builder = ModelBuilder()
        x = builder.num_var("x", lower_bound=0)
        y = builder.int_var("y", lower_bound=0, upper_bound=10)

        builder.le(x + 7 * y, 17.5)
        with builder.constraint("cap"):
            builder.le(x, 3.5)

        builder.maximize(x + 10 * y)
        builder.solver(SolverType.SCIP)
        model = builder.build()

Note:
    A builder is not thread-safe. All of its state (name sequence, registry,
    constraint list, objective) belongs to the instance, so independent models
    can be built side by side.
"""

import warnings
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from linearsolver.compiled import CompiledModel
from linearsolver.config import Config, SolverType
from linearsolver.errors import (
    DuplicateVariableNameError,
    NoConstraintsError,
    NoObjectiveError,
    NoSolverError,
    NoVariablesError,
    ObjectiveOverwriteWarning,
    UnknownVariableError,
)
from linearsolver.symbolic.expr import (
    Constraint,
    Expression,
    Goal,
    Objective,
    Relationship,
    Variable,
    VariableKind,
    VariableName,
)
from linearsolver.symbolic.lower import compile_constraint, compile_objective, compile_variable
from linearsolver.symbolic.tensor import NamedTensor


class ModelBuilder:
    """Collects variables, constraints and an objective, then compiles them.

    Attributes:
        settings (Config): Solver and development settings. ``build()`` copies
            the solver choice, tolerance and solver arguments into the model.
    """

    def __init__(self, settings: Optional[Config] = None):
        self.settings = settings if settings is not None else Config()
        self._sequence = 0
        self._variables: Dict[VariableName, Variable] = {}
        self._constraints: List[Constraint] = []
        self._objective: Optional[Objective] = None
        self._block_name: Optional[str] = None

    # ==================== VARIABLES ====================

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return tuple(self._variables.values())

    def variable(self, name: Union[str, VariableName]) -> Variable:
        """Return the registered variable called ``name``."""
        for key, variable in self._variables.items():
            if str(key) == str(name):
                return variable
        raise UnknownVariableError(str(name))

    def add_variable(
        self,
        kind: VariableKind = VariableKind.NUMERIC,
        name: Optional[str] = None,
        lower_bound: Optional[float] = None,
        upper_bound: Optional[float] = None,
    ) -> Variable:
        """Declare a new variable and register it in the model.

        Args:
            kind: BOOLEAN, INTEGER or NUMERIC
            name: Unique name. Defaults to ``x1``, ``x2``, ... in declaration order.
            lower_bound: Lower bound, unbounded if omitted
            upper_bound: Upper bound, unbounded if omitted

        Returns:
            Variable: The registered variable

        Raises:
            DuplicateVariableNameError: If ``name`` is already registered. The
                registry is left unchanged.
            ValueError: If the bounds are invalid for the variable kind
        """
        if name is None:
            self._sequence += 1
            name = f"x{self._sequence}"
        variable = Variable(name, kind, lower_bound=lower_bound, upper_bound=upper_bound)
        if variable.name in self._variables:
            raise DuplicateVariableNameError(str(variable.name))
        self._variables[variable.name] = variable
        return variable

    def num_var(self, name: Optional[str] = None, lower_bound=None, upper_bound=None) -> Variable:
        return self.add_variable(VariableKind.NUMERIC, name, lower_bound, upper_bound)

    def int_var(self, name: Optional[str] = None, lower_bound=None, upper_bound=None) -> Variable:
        return self.add_variable(VariableKind.INTEGER, name, lower_bound, upper_bound)

    def bool_var(self, name: Optional[str] = None) -> Variable:
        return self.add_variable(VariableKind.BOOLEAN, name)

    def tensor_var(
        self,
        tensor_keys: Sequence[Sequence],
        variable_provider: Callable[[str], Variable],
        name_prefix: Optional[str] = None,
    ) -> NamedTensor:
        """Declare one variable per key tuple of ``tensor_keys``.

        The variable for ``(k1, ..., kn)`` is named ``{name_prefix}_{k1}_..._{kn}``
        (prefix ``x`` when omitted) and created by ``variable_provider(name)``,
        which is expected to register it on this builder. If any declaration
        fails, the variables already declared by this call are removed again.

        Example:
            >>> flows = builder.tensor_num_var([nodes, nodes], "flow", lower_bound=0)
            >>> flows["s", "a"]
            Var('flow_s_a')
        """
        prefix = name_prefix if name_prefix is not None else "x"

        def provide(keys):
            return variable_provider("_".join([prefix] + [str(key) for key in keys]))

        registered = set(self._variables)
        sequence = self._sequence
        try:
            return NamedTensor.from_provider(tensor_keys, provide)
        except Exception:
            for name in [name for name in self._variables if name not in registered]:
                del self._variables[name]
            self._sequence = sequence
            raise

    def tensor_num_var(self, tensor_keys, name_prefix=None, lower_bound=None, upper_bound=None):
        return self.tensor_var(
            tensor_keys, lambda name: self.num_var(name, lower_bound, upper_bound), name_prefix
        )

    def tensor_int_var(self, tensor_keys, name_prefix=None, lower_bound=None, upper_bound=None):
        return self.tensor_var(
            tensor_keys, lambda name: self.int_var(name, lower_bound, upper_bound), name_prefix
        )

    def tensor_bool_var(self, tensor_keys, name_prefix=None):
        return self.tensor_var(tensor_keys, self.bool_var, name_prefix)

    def vector_num_var(self, keys, name_prefix=None, lower_bound=None, upper_bound=None):
        return self.tensor_num_var([keys], name_prefix, lower_bound, upper_bound)

    def vector_int_var(self, keys, name_prefix=None, lower_bound=None, upper_bound=None):
        return self.tensor_int_var([keys], name_prefix, lower_bound, upper_bound)

    def vector_bool_var(self, keys, name_prefix=None):
        return self.tensor_bool_var([keys], name_prefix)

    # ==================== CONSTRAINTS ====================

    @property
    def constraints(self) -> Tuple[Constraint, ...]:
        return tuple(self._constraints)

    def add_constraint(self, constraint: Constraint, name: Optional[str] = None) -> Constraint:
        """Register a constraint built with ``<=``, ``>=``, ``==`` (or ``le``/``ge``/``eq``).

        Args:
            constraint: Constraint to register
            name: Renames the constraint. Inside a ``constraint(name)`` block an
                unnamed constraint takes the block's name.

        Returns:
            Constraint: The registered constraint
        """
        if not isinstance(constraint, Constraint):
            raise TypeError(
                f"Expected a Constraint, got {type(constraint).__name__}. "
                "Relational operators only build constraints between expressions."
            )
        if name is None and constraint.name is None:
            name = self._block_name
        if name is not None:
            constraint = constraint.named(name)
        self._constraints.append(constraint)
        return constraint

    def relate(self, left, right, relationship: Relationship, name: Optional[str] = None) -> Constraint:
        """Build and register ``left {<=, ==, >=} right``. Scalars are accepted on both sides."""
        return self.add_constraint(Constraint(left, right, relationship), name)

    def le(self, left, right, name: Optional[str] = None) -> Constraint:
        return self.relate(left, right, Relationship.LE, name)

    def ge(self, left, right, name: Optional[str] = None) -> Constraint:
        return self.relate(left, right, Relationship.GE, name)

    def eq(self, left, right, name: Optional[str] = None) -> Constraint:
        return self.relate(left, right, Relationship.EQ, name)

    @contextmanager
    def constraint(self, name: str) -> Iterator["ModelBuilder"]:
        """Name every unnamed constraint registered inside the block.

        Example:
            >>> with builder.constraint("capacity"):
            ...     builder.add_constraint(x + y <= 10)
        """
        previous = self._block_name
        self._block_name = name
        try:
            yield self
        finally:
            self._block_name = previous

    # ==================== OBJECTIVE ====================

    @property
    def objective(self) -> Optional[Objective]:
        return self._objective

    def set_objective(self, expression, goal: Goal) -> Objective:
        """Set the objective. Only one is active; a new one replaces the old one.

        Warns:
            ObjectiveOverwriteWarning: If an objective was already set
        """
        objective = Objective(expression, goal)
        if self._objective is not None:
            warnings.warn(
                f"Replacing objective {self._objective} with {objective}",
                ObjectiveOverwriteWarning,
                stacklevel=2,
            )
        self._objective = objective
        return objective

    def minimize(self, expression) -> Objective:
        return self.set_objective(expression, Goal.MIN)

    def maximize(self, expression) -> Objective:
        return self.set_objective(expression, Goal.MAX)

    # ==================== REFORMULATIONS ====================

    def max_var(self, *expressions) -> Tuple[Variable, List[Constraint]]:
        """New variable bounded below by every expression.

        It equals the maximum only if the objective pushes it down (minimization).
        """
        variable = self.num_var()
        return variable, [self.ge(variable, expression) for expression in expressions]

    def min_var(self, *expressions) -> Tuple[Variable, List[Constraint]]:
        """New variable bounded above by every expression.

        It equals the minimum only if the objective pushes it up (maximization).
        """
        variable = self.num_var()
        return variable, [self.le(variable, expression) for expression in expressions]

    def abs_var(self, expression) -> Tuple[Tuple[Variable, Variable], Constraint, Expression]:
        """Split ``expression`` into non-negative positive and negative deviations.

        Returns ``((pos, neg), constraint, deviation)`` where ``pos - neg ==
        expression`` is registered and ``deviation = pos + neg`` equals the
        absolute value once it is minimized in the objective.
        """
        positive = self.num_var(lower_bound=0)
        negative = self.num_var(lower_bound=0)
        constraint = self.eq(positive - negative, expression)
        return (positive, negative), constraint, positive + negative

    def maxmin(self, *expressions) -> Tuple[Objective, Variable, List[Constraint]]:
        """Maximize the smallest of ``expressions`` (sets the objective)."""
        variable, constraints = self.min_var(*expressions)
        return self.maximize(variable), variable, constraints

    def minmax(self, *expressions) -> Tuple[Objective, Variable, List[Constraint]]:
        """Minimize the largest of ``expressions`` (sets the objective)."""
        variable, constraints = self.max_var(*expressions)
        return self.minimize(variable), variable, constraints

    # ==================== SOLVER & BUILD ====================

    def solver(self, solver: Union[SolverType, str]) -> "ModelBuilder":
        self.settings.solver.solver = SolverType(solver)
        return self

    @property
    def tolerance(self) -> float:
        return self.settings.solver.tolerance

    @tolerance.setter
    def tolerance(self, value: float):
        self.settings.solver.tolerance = float(value)

    def build(self) -> CompiledModel:
        """Validate the model and compile it.

        Checks, in order, that there are variables, constraints, an objective
        and a chosen solver. Does no I/O and can be called repeatedly.

        Raises:
            NoVariablesError: If no variable was declared
            NoConstraintsError: If no constraint was registered
            NoObjectiveError: If no objective was set
            NoSolverError: If no solver was chosen
            UnknownVariableError: If a constraint or the objective references a
                variable that was not declared on this builder
        """
        if not self._variables:
            raise NoVariablesError()
        if not self._constraints:
            raise NoConstraintsError()
        if self._objective is None:
            raise NoObjectiveError()
        solver_settings = self.settings.solver
        if solver_settings.solver is None:
            raise NoSolverError()

        known = self._variables.keys()
        return CompiledModel(
            variables=tuple(compile_variable(v) for v in self._variables.values()),
            constraints=tuple(compile_constraint(c, known) for c in self._constraints),
            objective=compile_objective(self._objective, known),
            solver=SolverType(solver_settings.solver),
            tolerance=solver_settings.tolerance,
            solver_args=dict(solver_settings.solver_args),
            verbose=solver_settings.verbose,
        )

    def __repr__(self):
        return (
            f"ModelBuilder(variables={len(self._variables)}, "
            f"constraints={len(self._constraints)}, objective={self._objective})"
        )
