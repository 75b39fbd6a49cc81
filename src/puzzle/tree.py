"""
Exploration tree arena.

The level payload stores the tree as nested ``nextMoves`` lists. It is
flattened once into a list of ``TreeNode`` entries addressed by index, with
the root at index 0. Indices follow a pre-order walk of the payload, so a
child always has a larger index than its parent and the layout is the same
every time a level is loaded.
"""

from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .models import CellCoordinates, ExplorationNodeData, Move, MoveOption


ROOT = 0


class TreeNode(BaseModel):
    """A node of the exploration tree. The root has no move and no parent."""
    index: int
    parent: Optional[int] = None
    depth: int = 0
    move: Optional[Move] = None
    words_formed: List[str] = Field(default_factory=list)
    children: List[int] = Field(default_factory=list)
    subtree_depth: int = 0  # deepest depth reachable at or below this node

    @property
    def is_leaf(self) -> bool:
        return not self.children


class ExplorationTree:
    """Read-only tree of every legal move sequence from a level's initial grid."""

    def __init__(self, nodes: List[TreeNode]):
        self._nodes = nodes

    @classmethod
    def from_payload(cls, root_moves: Sequence[ExplorationNodeData]) -> "ExplorationTree":
        """Flatten the nested payload into an arena."""
        nodes: List[TreeNode] = [TreeNode(index=ROOT)]

        # (payload node, parent index); reversed so children pop in payload order
        stack = [(data, ROOT) for data in reversed(root_moves)]
        while stack:
            data, parent_index = stack.pop()
            parent = nodes[parent_index]
            node = TreeNode(
                index=len(nodes),
                parent=parent_index,
                depth=parent.depth + 1,
                move=data.move,
                words_formed=[w.upper() for w in data.words_formed],
            )
            nodes.append(node)
            parent.children.append(node.index)
            stack.extend((child, node.index) for child in reversed(data.next_moves))

        # Children always follow their parent, so a reverse sweep sees every
        # subtree before the node above it.
        for node in reversed(nodes):
            node.subtree_depth = max(
                [node.depth] + [nodes[c].subtree_depth for c in node.children]
            )

        return cls(nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def root(self) -> TreeNode:
        return self._nodes[ROOT]

    @property
    def max_depth(self) -> int:
        """Depth of the deepest node in the tree."""
        return self.root.subtree_depth

    def node(self, index: int) -> TreeNode:
        return self._nodes[index]

    def children(self, index: int) -> List[TreeNode]:
        return [self._nodes[c] for c in self._nodes[index].children]

    def parent(self, index: int) -> Optional[TreeNode]:
        parent_index = self._nodes[index].parent
        return None if parent_index is None else self._nodes[parent_index]

    def move_options(self, index: int) -> List[MoveOption]:
        """Child moves available from a node."""
        return [
            MoveOption(
                node_index=child.index,
                move=child.move,
                words_formed=list(child.words_formed),
                subtree_depth=child.subtree_depth,
            )
            for child in self.children(index)
        ]

    def match_move(self, index: int, a: CellCoordinates, b: CellCoordinates) -> Optional[TreeNode]:
        """
        Find the child of a node whose recorded cell pair equals {a, b}.

        The comparison ignores swap direction. Returns None for a leaf or
        when no child matches.
        """
        candidate = Move(from_cell=a, to_cell=b)
        for child in self.children(index):
            if child.move.same_cells(candidate):
                return child
        return None

    def walk(self, moves: Sequence[Move], start: int = ROOT) -> Optional[int]:
        """
        Follow a sequence of moves edge by edge.

        Returns:
            Index of the node reached, or None on the first move that is not
            a child of the node reached so far
        """
        index = start
        for move in moves:
            child = self.match_move(index, move.from_cell, move.to_cell)
            if child is None:
                return None
            index = child.index
        return index

    def path_to(self, index: int) -> List[TreeNode]:
        """Nodes from the first move down to ``index`` (empty for the root)."""
        path: List[TreeNode] = []
        node = self._nodes[index]
        while node.parent is not None:
            path.append(node)
            node = self._nodes[node.parent]
        path.reverse()
        return path
