from termcolor import colored

from linearsolver.compiled import CompiledModel
from linearsolver.solution import Solution, SolveStatus
from linearsolver.symbolic.expr import VariableKind

RULE = "-" * 72

_STATUS_COLORS = {
    SolveStatus.OPTIMAL: "green",
    SolveStatus.FEASIBLE: "yellow",
    SolveStatus.INFEASIBLE: "red",
    SolveStatus.UNBOUNDED: "red",
    SolveStatus.ABNORMAL: "red",
    SolveStatus.NOT_SOLVED: "magenta",
}


def _bound(value: float) -> str:
    return f"{value:g}"


def model_summary(model: CompiledModel):
    kinds = {kind: 0 for kind in VariableKind}
    for variable in model.variables:
        kinds[variable.kind] += 1
    equalities = sum(1 for c in model.constraints if c.is_equality)

    print(colored(RULE, "cyan"))
    print("{:^24} | {:^14} | {:^14} | {:^12}".format("Solver", "Variables", "Constraints", "Goal"))
    print(colored(RULE, "cyan"))
    print(
        "{:^24} | {:^14} | {:^14} | {:^12}".format(
            model.solver.value,
            len(model.variables),
            len(model.constraints),
            model.objective.goal.value,
        )
    )
    print(
        "Variables:   {} numeric, {} integer, {} boolean".format(
            kinds[VariableKind.NUMERIC], kinds[VariableKind.INTEGER], kinds[VariableKind.BOOLEAN]
        )
    )
    print(
        "Constraints: {} equality, {} inequality".format(
            equalities, len(model.constraints) - equalities
        )
    )
    print(colored(RULE, "cyan"))


def solution_table(solution: Solution):
    status = colored(solution.status.value.upper(), _STATUS_COLORS[solution.status], attrs=["bold"])
    print(colored(RULE, "cyan"))
    print("Status: " + status)
    if solution.objective_value is not None:
        print(f"Objective value: {solution.objective_value:.6g}")
    if solution.values:
        print(colored(RULE, "cyan"))
        print("{:<30} | {:>14} | {:>10} | {:>10}".format("Variable", "Value", "Lower", "Upper"))
        print(colored(RULE, "cyan"))
        for name, value in solution.values.items():
            lower = upper = ""
            if solution.model is not None:
                variable = solution.model.variable(name)
                lower, upper = _bound(variable.lower_bound), _bound(variable.upper_bound)
            print("{:<30} | {:>14.6g} | {:>10} | {:>10}".format(name, value, lower, upper))
    if solution.dual_values:
        print(colored(RULE, "cyan"))
        print("{:<30} | {:>14}".format("Constraint", "Dual value"))
        print(colored(RULE, "cyan"))
        for name, dual in solution.dual_values.items():
            print("{:<30} | {:>14.6g}".format(name, dual))
    print(colored(RULE, "cyan"))
