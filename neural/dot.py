"""
virtual_creatures module: neural/dot.py

Graphviz export of every network of a Morphology, one cluster per network.
"""

from __future__ import annotations
from typing import List

from morphology.morphology import Morphology
from neural.neuron import NeuralSpec


def _node_label(n: NeuralSpec) -> str:
    if n.is_sensor():
        return f"Sensor{n.id}"
    if n.is_actor():
        return f"Actor{n.id}"
    return f"{n.function.value}{n.id}"


def to_dot(morphology: Morphology, name: str = "creature") -> str:
    lines: List[str] = [f'digraph "{name}" {{', "  compound=true;"]
    networks = morphology.networks()
    for i, network in enumerate(networks):
        label = "Brain" if i == 0 else f"Edge {i - 1}: {morphology.edges[i - 1].joint.joint_type.name}"
        lines.append(f"  subgraph cluster_{i} {{")
        lines.append(f'    label="{label}";')
        for n in network.sensors:
            lines.append(f'    n{n.id} [label="{_node_label(n)}", shape=invtriangle];')
        for n in network.neurons:
            lines.append(f'    n{n.id} [label="{_node_label(n)}", shape=ellipse];')
        for n in network.actors:
            lines.append(f'    n{n.id} [label="{_node_label(n)}", shape=box];')
        lines.append("  }")

    # an inter-network connection is listed in two networks, emit it from its source only
    for network in networks:
        for c in network.internal_connections() + network.outgoing_connections():
            lines.append(f'  n{c.source.id} -> n{c.destination.id} [label="{c.weight:.2f}"];')
    lines.append("}")
    return "\n".join(lines) + "\n"
