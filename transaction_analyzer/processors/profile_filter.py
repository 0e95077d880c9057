"""
Stack frame include/exclude filtering for merged profiles.
"""

from typing import Dict, List, Optional, Sequence, Tuple

from ..core.types import ProfileNode


class ProfileFilter:
    """
    Filters a merged profile by stack frame text.

    Patterns match case-insensitively as substrings of frame labels. A sample is
    kept by ``include`` when any frame of its stack matches, and dropped by
    ``exclude`` when any frame of its stack matches.
    """

    def __init__(self, include: Sequence[str] = (), exclude: Sequence[str] = ()):
        self.include = [pattern.lower() for pattern in include if pattern]
        self.exclude = [pattern.lower() for pattern in exclude if pattern]

    def is_active(self) -> bool:
        return bool(self.include or self.exclude)

    @staticmethod
    def _matches(node: ProfileNode, patterns: List[str]) -> bool:
        if node.frame_label is None:
            return False
        label = node.frame_label.lower()
        return any(pattern in label for pattern in patterns)

    def apply(self, profile: ProfileNode) -> ProfileNode:
        """Return a filtered copy of ``profile``; the input is not modified."""
        filtered = profile
        if self.include:
            filtered = self._apply_include(filtered)
        if self.exclude:
            filtered = self._apply_exclude(filtered)
        return filtered

    @staticmethod
    def _pre_order(profile: ProfileNode, patterns: List[str],
                   inherit: bool) -> List[Tuple[ProfileNode, bool]]:
        """List nodes parent-first with whether they (or, if inherited, an ancestor) match."""
        order = []
        stack = [(profile, False)]
        while stack:
            node, ancestor_matched = stack.pop()
            matched = ProfileFilter._matches(node, patterns) or (inherit and ancestor_matched)
            order.append((node, matched))
            for child in node.children:
                stack.append((child, matched))
        return order

    def _apply_include(self, profile: ProfileNode) -> ProfileNode:
        results: Dict[int, Optional[ProfileNode]] = {}
        for node, covered in reversed(self._pre_order(profile, self.include, inherit=True)):
            children = [results[id(child)] for child in node.children]
            children = [child for child in children if child is not None]
            if covered:
                sample_count = node.sample_count
            else:
                sample_count = sum(child.sample_count for child in children)
            if sample_count == 0 and node is not profile:
                results[id(node)] = None
            else:
                results[id(node)] = ProfileNode(node.frame_label, sample_count, children)
        return results[id(profile)]

    def _apply_exclude(self, profile: ProfileNode) -> ProfileNode:
        results: Dict[int, Optional[ProfileNode]] = {}
        for node, matched in reversed(self._pre_order(profile, self.exclude, inherit=False)):
            if matched:
                results[id(node)] = None
                continue
            sample_count = node.sample_count
            children = []
            for child in node.children:
                filtered_child = results[id(child)]
                if filtered_child is None:
                    sample_count -= child.sample_count
                else:
                    sample_count -= child.sample_count - filtered_child.sample_count
                    children.append(filtered_child)
            if sample_count <= 0 and node is not profile:
                results[id(node)] = None
            else:
                results[id(node)] = ProfileNode(node.frame_label, max(0, sample_count), children)
        return results[id(profile)]
