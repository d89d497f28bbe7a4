"""Deterministic layout for family trees.

Generations sit on horizontal bands. The root is centered in the viewport,
its children (the mothers, or everyone in a flat tree) share one band
centered under the root, and each of them has its own children centered
underneath at a fixed sibling spacing. Coordinates depend only on the tree
shape and the viewport, never on member identity.
"""

from typing import Optional

from famlink.config import LayoutSettings, settings as app_settings
from famlink.family.tree_builder import TreeNode


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


class LayoutEngine:
    """Assigns x/y to every node of a tree, in place."""

    def __init__(self, config: Optional[LayoutSettings] = None):
        self.config = config or app_settings.layout

    def layout(self, root: TreeNode, viewport_width: float, viewport_height: float) -> None:
        cfg = self.config
        gap = self._generation_gap(viewport_height)

        root.x = viewport_width / 2
        root.y = cfg.top_offset

        band = root.children
        if not band:
            return

        spacing = self.band_spacing(band, viewport_width)
        start_x = root.x - spacing * (len(band) - 1) / 2
        for index, node in enumerate(band):
            node.x = start_x + index * spacing
            node.y = root.y + gap
            self._place_descendants(node, gap)

    def band_spacing(self, band: list[TreeNode], viewport_width: float) -> float:
        """
        Distance between adjacent centers on the first-generation band.

        Starts from the viewport share clamped to [min_spacing, max_spacing],
        applies the spread factor, then widens until no two neighbouring
        child groups can touch.
        """
        cfg = self.config
        available = max(viewport_width - 2 * cfg.margin, 0.0)
        spacing = clamp(available / (len(band) + 1), cfg.min_spacing, cfg.max_spacing)
        spacing *= cfg.spread_factor

        half_spans = [self.half_span(len(node.children)) for node in band]
        for left, right in zip(half_spans, half_spans[1:]):
            spacing = max(spacing, left + right + cfg.branch_gap)
        return spacing

    def half_span(self, child_count: int) -> float:
        """Half the horizontal extent of a node's children row, cards included."""
        cfg = self.config
        if child_count <= 1:
            return cfg.node_width / 2
        return (child_count - 1) * cfg.sibling_spacing / 2 + cfg.node_width / 2

    def _place_descendants(self, parent: TreeNode, gap: float) -> None:
        sibling = self.config.sibling_spacing
        start_x = parent.x - sibling * (len(parent.children) - 1) / 2
        for index, child in enumerate(parent.children):
            child.x = start_x + index * sibling
            child.y = parent.y + gap
            self._place_descendants(child, gap)

    def _generation_gap(self, viewport_height: float) -> float:
        # Three bands fit the viewport when possible, never closer than min_generation_gap
        cfg = self.config
        usable = viewport_height - cfg.top_offset - cfg.margin
        return clamp(usable / 2, cfg.min_generation_gap, cfg.generation_gap)


def layout(root: TreeNode, viewport_width: float, viewport_height: float,
           config: Optional[LayoutSettings] = None) -> None:
    """Lay out ``root`` in place for the given viewport."""
    LayoutEngine(config).layout(root, viewport_width, viewport_height)
