"""Evolution-chain traversal on the immutable EvolutionStage tree.

All functions are pure and recursive. The one structural invariant the
engine relies on is that a stage never lists itself as its own
evolution; ``is_self_evolution`` states that check explicitly and every
child selection goes through it.
"""

from __future__ import annotations

import logging

from evolution_engine.models.creature import Creature, EvolutionStage

logger = logging.getLogger(__name__)


def is_self_evolution(stage: EvolutionStage, child: EvolutionStage) -> bool:
    """True when *child* would evolve *stage* into itself."""
    return child.id == stage.id


def find_stage(root: EvolutionStage | None, creature_id: int) -> EvolutionStage | None:
    """Depth-first search for the stage whose id matches *creature_id*."""
    if root is None:
        return None
    if root.id == creature_id:
        return root
    for child in root.evolves_to:
        found = find_stage(child, creature_id)
        if found is not None:
            return found
    return None


def valid_children(stage: EvolutionStage) -> tuple[EvolutionStage, ...]:
    """Direct evolutions of *stage*, in chain order, minus self-references."""
    children = []
    for child in stage.evolves_to:
        if is_self_evolution(stage, child):
            logger.warning(
                "Skipping self-evolution %s (id=%d) in chain", child.name, child.id
            )
            continue
        children.append(child)
    return tuple(children)


def first_evolution(stage: EvolutionStage) -> EvolutionStage | None:
    """The first listed evolution of *stage*.

    Branching chains always resolve to the first branch; there is no
    player choice.
    """
    children = valid_children(stage)
    return children[0] if children else None


def next_evolution_for(root: EvolutionStage | None, creature_id: int) -> EvolutionStage | None:
    """Find *creature_id* anywhere in the chain and return its first evolution."""
    stage = find_stage(root, creature_id)
    if stage is None:
        return None
    return first_evolution(stage)


def next_evolutions(root: EvolutionStage | None, creature_id: int) -> tuple[Creature, ...]:
    """Direct evolutions of *creature_id* as display creatures.

    Types are unknown until fetched, so they default to ``("normal",)``.
    """
    stage = find_stage(root, creature_id)
    if stage is None:
        return ()
    return tuple(Creature(id=child.id, name=child.name) for child in valid_children(stage))


def chain_depth(stage: EvolutionStage) -> int:
    """Longest path from *stage* down to a leaf, counting *stage* itself."""
    if not stage.evolves_to:
        return 1
    return 1 + max(chain_depth(child) for child in stage.evolves_to)


def all_ids(root: EvolutionStage) -> list[int]:
    """Every creature id in the chain, pre-order."""
    ids = [root.id]
    for child in root.evolves_to:
        ids.extend(all_ids(child))
    return ids
