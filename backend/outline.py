from models import NodeBase, child_nodes


def render_outline(node: NodeBase, depth: int = 0) -> str:
    """Indented `- name (TYPE)` listing of a node and all of its descendants."""
    line = f"{'  ' * depth}- {node.label} ({node.type})\n"
    return line + "".join(render_outline(child, depth + 1) for child in child_nodes(node))


def count_nodes(node: NodeBase) -> int:
    """Total number of nodes in the subtree rooted at `node`."""
    total = 0
    stack = [node]
    while stack:
        current = stack.pop()
        total += 1
        stack.extend(child_nodes(current))
    return total
