"""Read-only queries over the exploration tree: best moves and word chains."""

import logging
from typing import List, Optional, Sequence

from .models import HistoryEntry
from .tree import ExplorationTree, TreeNode, ROOT

logger = logging.getLogger("wordswap.chain")


def _ranking_key(node: TreeNode):
    # Deepest subtree first, then canonical cell order, then arena order
    return (-node.subtree_depth, node.move.canonical(), node.index)


def best_child(tree: ExplorationTree, index: int) -> Optional[TreeNode]:
    """
    Pick the child move that keeps the greatest depth reachable.

    Ties on reachable depth go to the move whose canonical cell pair sorts
    first (top-left cells first).
    """
    children = tree.children(index)
    if not children:
        return None
    return min(children, key=_ranking_key)


def deepest_path(tree: ExplorationTree, index: int = ROOT) -> List[TreeNode]:
    """Follow ``best_child`` from a node down to a leaf."""
    path: List[TreeNode] = []
    node = best_child(tree, index)
    while node is not None:
        path.append(node)
        node = best_child(tree, node.index)
    return path


def _words_along(path: Sequence[TreeNode]) -> List[str]:
    words: List[str] = []
    for node in path:
        words.extend(node.words_formed)
    return words


def find_longest_word_chain(tree: ExplorationTree, history: Sequence[HistoryEntry]) -> List[str]:
    """
    Words along the deepest-reaching path consistent with the moves played.

    While the played moves stay on a branch that can still reach the tree's
    maximum depth, the chain is the played words followed by the deepest
    continuation from the current node. With no moves played, or once the
    player has left every maximal branch, the chain is the tree's own
    deepest path from the root.
    """
    if history:
        index = tree.walk([entry.move for entry in history])
        if index is None:
            logger.debug("History leaves the exploration tree; using root chain")
        elif tree.node(index).subtree_depth == tree.max_depth:
            return _words_along(tree.path_to(index)) + _words_along(deepest_path(tree, index))

    return _words_along(deepest_path(tree, ROOT))
