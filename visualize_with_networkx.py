import sys

import matplotlib.pyplot as plt
import networkx as nx

from route_lib import Topology, dijkstra, link_state
from route_lib.importer import load_topology

# Load a topology CSV if given, otherwise draw a small example
if len(sys.argv) > 1:
    topology, _ = load_topology(sys.argv[1])
else:
    topology = Topology()
    topology.add_link("A", "B", 5)
    topology.add_link("B", "C", 2)
    topology.add_link("A", "D", 1)
    topology.add_link("D", "C", 8)
    topology.add_router("E")

local = sys.argv[2] if len(sys.argv) > 2 else topology.routers()[0]
table = link_state.compute_table(topology, local)

# Highlight the shortest-path tree edges used from the local router
G = topology.to_networkx()
_, predecessors = dijkstra(topology, local)
tree_edges = {frozenset((r, p)) for r, p in predecessors.items() if p is not None}
edge_colors = ["green" if frozenset(e) in tree_edges else "gray" for e in G.edges()]
labels = {
    r: f"{r}\n{'∞' if table.cost(local, r) == float('inf') else table.cost(local, r)}"
    for r in G.nodes()
}

plt.figure(figsize=(6, 6))
pos = nx.circular_layout(G)
nx.draw(
    G,
    pos,
    labels=labels,
    node_color=["tomato" if r == local else "lightblue" for r in G.nodes()],
    edge_color=edge_colors,
    node_size=1000,
    font_size=10,
    font_weight="bold",
)
nx.draw_networkx_edge_labels(G, pos, edge_labels=nx.get_edge_attributes(G, "cost"))
plt.title(f"Shortest-path tree from {local}")
plt.tight_layout()
plt.show()
