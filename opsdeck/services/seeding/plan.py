from __future__ import annotations

import logging
from dataclasses import dataclass, field
from graphlib import CycleError, TopologicalSorter
from typing import Any, Awaitable, Callable

from opsdeck.core.errors import SeedPlanError


logger = logging.getLogger(__name__)


StepFn = Callable[[Any], Awaitable[None]]


@dataclass(frozen=True)
class SeedStep:
    name: str
    run: StepFn
    depends_on: tuple[str, ...] = field(default=())


class SeedPlan:
    """Dependency-ordered list of seed steps.

    Steps run in topological order of ``depends_on``; among steps that are
    ready at the same time, declaration order wins so every run writes rows
    in the same sequence.
    """

    def __init__(self, steps: list[SeedStep]) -> None:
        self._steps: dict[str, SeedStep] = {}
        for step in steps:
            if step.name in self._steps:
                raise SeedPlanError(f"duplicate seed step {step.name!r}")
            self._steps[step.name] = step
        self._order = self._resolve_order()

    def _resolve_order(self) -> list[SeedStep]:
        position = {name: index for index, name in enumerate(self._steps)}
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for step in self._steps.values():
            for dependency in step.depends_on:
                if dependency not in self._steps:
                    raise SeedPlanError(f"seed step {step.name!r} depends on unknown step {dependency!r}")
            sorter.add(step.name, *step.depends_on)
        try:
            sorter.prepare()
        except CycleError as exc:
            cycle = " -> ".join(exc.args[1]) if len(exc.args) > 1 else "unknown"
            raise SeedPlanError(f"seed plan has a dependency cycle: {cycle}") from exc

        ordered: list[SeedStep] = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=position.__getitem__)
            for name in ready:
                ordered.append(self._steps[name])
                sorter.done(name)
        return ordered

    @property
    def steps(self) -> list[SeedStep]:
        return list(self._order)

    @property
    def names(self) -> list[str]:
        return [step.name for step in self._order]

    async def run(self, context: Any) -> None:
        for step in self._order:
            logger.info("seed_step_start step=%s", step.name)
            await step.run(context)
