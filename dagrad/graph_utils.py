"""
Graph inspection helpers.

Summaries of the DAG reachable from a root: sizes, fan-in/fan-out and the
operator mix. Nothing here prints; callers decide where the text goes.
"""

from collections import Counter
from typing import Dict

import numpy as np

from .core.graph import topological_order


def get_graph_stats(root) -> Dict:
    """
    Statistics of the graph reachable from `root`.

    Returns:
        dict with nodes, edges, leaves, max/avg fan-in, max/avg fan-out
        (fan-out = number of incoming edges from consumers inside this graph,
        so x*x counts twice), shared_nodes (fan-out > 1) and an
        op_tag -> count breakdown.
    """
    order = topological_order(root)
    n_nodes = len(order)

    fan_ins = [len(node.children()) for node in order]
    fan_outs = Counter()
    for node in order:
        for child in node.children():
            fan_outs[child.id()] += 1
    fan_out_list = [fan_outs[node.id()] for node in order]

    op_counter = Counter(node.op_tag for node in order)

    return {
        'nodes': n_nodes,
        'edges': sum(fan_ins),
        'leaves': sum(1 for node in order if node.is_leaf()),
        'max_fan_in': max(fan_ins),
        'avg_fan_in': float(np.mean(fan_ins)),
        'max_fan_out': max(fan_out_list),
        'avg_fan_out': float(np.mean(fan_out_list)),
        'shared_nodes': sum(1 for n in fan_out_list if n > 1),
        'operations': dict(op_counter),
    }


def analyze_graph_complexity(root) -> str:
    """
    Text report on the graph reachable from `root`.
    """
    stats = get_graph_stats(root)

    report = []
    report.append("Graph Complexity Analysis:")
    report.append(f"  Total nodes: {stats['nodes']:,}")
    report.append(f"  Total connections: {stats['edges']:,}")
    report.append(f"  Shared nodes (fan-out > 1): {stats['shared_nodes']:,}")
    report.append(f"  Average branching: {stats['avg_fan_out']:.2f}")

    if stats['nodes'] < 1000:
        complexity = "Low"
    elif stats['nodes'] < 10000:
        complexity = "Medium"
    else:
        complexity = "High"
    report.append(f"  Complexity level: {complexity}")

    top_ops = sorted(stats['operations'].items(), key=lambda x: x[1], reverse=True)[:3]
    report.append("  Top operations:")
    for op, count in top_ops:
        pct = 100.0 * count / stats['nodes']
        report.append(f"    - {op}: {pct:.1f}%")

    return "\n".join(report)


def format_graph(root, max_nodes: int = 20) -> str:
    """
    One line per node, children before parents:

        Node    0: var          [1.0, 2.0] [leaf]
        Node    2: mul          [0.0, 4.0] <- [Node0, Node1]
    """
    order = topological_order(root)
    index = {node.id(): i for i, node in enumerate(order)}

    lines = []
    for i, node in enumerate(order[:max_nodes]):
        val = np.array2string(node.value(), precision=6, separator=', ', threshold=6)
        if node.is_leaf():
            lines.append(f"Node {i:4d}: {node.op_tag:12s} {val} [leaf]")
        else:
            parents = ", ".join(f"Node{index[c.id()]}" for c in node.children())
            lines.append(f"Node {i:4d}: {node.op_tag:12s} {val} <- [{parents}]")

    if len(order) > max_nodes:
        lines.append(f"... ({len(order) - max_nodes} more nodes)")
    return "\n".join(lines)
