"""
Flame graph reduction of execution profiles.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..core.types import ProfileNode

logger = logging.getLogger(__name__)


@dataclass
class FlameGraphNode:
    """Display node: samples in this frame alone and including its callees."""
    label: str
    self_samples: int
    total_samples: int
    children: List['FlameGraphNode'] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """
        Serialize as ``{label: {"svUnique", "svTotal", "svChildren"}}``.

        Sibling frames sharing a label get a `` [n]`` suffix so none are dropped.
        """
        root: Dict = {}
        stack = [(self, root)]
        while stack:
            node, siblings = stack.pop()
            children_out: Dict = {}
            siblings[_unique_key(node.label, siblings)] = {
                'svUnique': node.self_samples,
                'svTotal': node.total_samples,
                'svChildren': children_out,
            }
            for child in reversed(node.children):
                stack.append((child, children_out))
        return root


def _unique_key(label: str, siblings: Dict) -> str:
    if label not in siblings:
        return label
    n = 2
    while f"{label} [{n}]" in siblings:
        n += 1
    return f"{label} [{n}]"


class FlameGraphReducer:
    """Reduces a profile tree to flame graph display nodes."""

    @staticmethod
    def select_interesting_root(profile: ProfileNode) -> ProfileNode:
        """
        Skip the chain of single-child frames at the top of the profile.

        Descends while the current node has exactly one child. If the descent ends
        on a frame with no samples or no callees, the whole tree is a single branch
        and the original root is kept.
        """
        node = profile
        while len(node.children) == 1:
            node = node.children[0]
        if node.is_empty() or not node.children:
            return profile
        return node

    def reduce(self, profile: ProfileNode) -> FlameGraphNode:
        """
        Build the flame graph for a merged profile.

        The returned root is a synthetic "" node with no self samples whose only
        child is the interesting root, matching what flame graph widgets expect.

        Args:
            profile: Merged profile tree

        Returns:
            Synthetic root display node
        """
        interesting = self.select_interesting_root(profile)
        root = FlameGraphNode(label='', self_samples=0, total_samples=interesting.sample_count)
        stack = [(interesting, root)]
        while stack:
            node, parent = stack.pop()
            child_samples = sum(child.sample_count for child in node.children)
            self_samples = node.sample_count - child_samples
            if self_samples < 0:
                logger.warning("Frame %r has %d samples but its callees have %d, clamping "
                               "self samples to zero", node.frame_label, node.sample_count,
                               child_samples)
                self_samples = 0
            display = FlameGraphNode(
                label=node.frame_label if node.frame_label is not None else '',
                self_samples=self_samples,
                total_samples=node.sample_count,
            )
            parent.children.append(display)
            for child in reversed(node.children):
                stack.append((child, display))
        return root

    def reduce_to_dict(self, profile: Optional[ProfileNode]) -> Dict:
        if profile is None:
            profile = ProfileNode(frame_label=None, sample_count=0)
        return self.reduce(profile).to_dict()
