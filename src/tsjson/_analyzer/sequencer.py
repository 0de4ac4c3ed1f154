"""
Topological sequencing of bindings.

Orders bindings so that every binding comes after the bindings it depends on,
using a depth-first post-order walk in declaration order. Names without a
binding are leaves and never appear in the output. Cycles are not an error:
a name already on the walk is not expanded again, so the cycle is broken at
the first revisited binding and every name is emitted exactly once.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence


def sequence_bindings(dependencies: Mapping[str, Sequence[str]]) -> list[str]:
    """Order binding names so dependencies precede dependents.

    Args:
        dependencies: Binding name -> referenced names, in declaration order

    Returns:
        Every binding name exactly once, dependencies first
    """
    ordered: list[str] = []
    visited: set[str] = set()

    for name in dependencies:
        if name in visited:
            continue
        visited.add(name)
        # Explicit stack instead of recursion so long chains stay safe
        stack: list[tuple[str, Iterator[str]]] = [(name, iter(dependencies[name]))]
        while stack:
            current, pending = stack[-1]
            for dependency in pending:
                if dependency in dependencies and dependency not in visited:
                    visited.add(dependency)
                    stack.append((dependency, iter(dependencies[dependency])))
                    break
            else:
                stack.pop()
                ordered.append(current)

    return ordered


def find_cycles(dependencies: Mapping[str, Sequence[str]]) -> list[list[str]]:
    """Report dependency cycles among bindings, for diagnostics only.

    Returns:
        Each cycle as the list of names along it, starting at the name first
        reached in declaration order
    """
    cycles: list[list[str]] = []
    state: dict[str, int] = {}  # 1 = on the current path, 2 = done

    for start in dependencies:
        if start in state:
            continue
        path: list[str] = [start]
        state[start] = 1
        stack: list[Iterator[str]] = [iter(dependencies[start])]
        while stack:
            for dependency in stack[-1]:
                if dependency not in dependencies:
                    continue
                if state.get(dependency) == 1:
                    cycles.append(path[path.index(dependency) :])
                elif dependency not in state:
                    state[dependency] = 1
                    path.append(dependency)
                    stack.append(iter(dependencies[dependency]))
                    break
            else:
                stack.pop()
                state[path.pop()] = 2

    return cycles
