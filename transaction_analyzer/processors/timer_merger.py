"""
Timer tree merging across sampling intervals.
"""

import logging
from typing import Dict, Iterable, List, Tuple

from ..core.types import TimerNode

logger = logging.getLogger(__name__)


class TimerTreeMerger:
    """Merges timer trees into one tree of summed totals."""

    @staticmethod
    def merge(roots: Iterable[TimerNode]) -> TimerNode:
        """
        Merge timer trees node by node.

        Nodes are matched by name at each level below the root. A node missing from
        some inputs is merged as if those inputs contributed zero. Siblings sharing a
        name inside one input are an upstream defect; they are kept as distinct
        entries, the n-th duplicate of a name matching the n-th duplicate in the
        other inputs.

        The walk uses an explicit stack, so tree depth is not limited by the
        interpreter's recursion limit.

        Args:
            roots: Synthetic root timers of the trees to merge

        Returns:
            Newly built merged tree; inputs are not modified
        """
        roots = list(roots)
        merged_root = TimerNode(name=roots[0].name if roots else None, total_micros=0)
        stack: List[Tuple[TimerNode, List[TimerNode]]] = [(merged_root, roots)]

        while stack:
            target, sources = stack.pop()
            groups: Dict[Tuple[str, int], List[TimerNode]] = {}
            for source in sources:
                target.total_micros += source.total_micros
                target.count += source.count
                occurrences: Dict[str, int] = {}
                for child in source.children:
                    occurrence = occurrences.get(child.name, 0)
                    occurrences[child.name] = occurrence + 1
                    if occurrence:
                        logger.warning("Timer %r appears %d times under %r, keeping duplicates "
                                       "as distinct entries", child.name, occurrence + 1,
                                       source.name)
                    groups.setdefault((child.name, occurrence), []).append(child)

            for (name, _), group in groups.items():
                merged_child = TimerNode(name=name, total_micros=0)
                target.children.append(merged_child)
                stack.append((merged_child, group))

        return merged_root
