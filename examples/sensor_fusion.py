"""Sensor fusion.

Two noisy sensors observe the same quantity through known gains. The
belief about the quantity is the product of a prior and the messages
pulled back from both observations.
"""

import logging

import fglab as fg

logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

graph = fg.FactorGraph()

# Prior belief about the quantity
prior = graph.add_node(fg.ConstantNode(fg.Gaussian(m=0.0, V=100.0), id="prior"))
state = graph.add_node(fg.EqualityNode(3, id="state"))
graph.connect(prior, state)

# Sensor 1 reads twice the quantity, sensor 2 reads it unscaled
sensor1 = graph.add_node(fg.FixedGainNode(2.0, id="sensor1"))
sensor2 = graph.add_node(fg.FixedGainNode(1.0, id="sensor2"))
graph.connect(state, sensor1)

# The third port of the state goes to a second equality node shared with sensor 2
junction = graph.add_node(fg.EqualityNode(3, id="junction"))
graph.connect(state, junction)
graph.connect(junction, sensor2)

reading1 = graph.add_node(fg.ConstantNode(fg.Gaussian(m=4.2, V=0.5), id="reading1"))
reading2 = graph.add_node(fg.ConstantNode(fg.Gaussian(m=1.9, V=0.25), id="reading2"))
graph.connect(sensor1, reading1)
graph.connect(sensor2, reading2)

edge = graph.connect(junction, graph.add_node(fg.ConstantNode(fg.Gaussian(m=0.0, V=1e6), id="vague")))

fg.calculate_forward_message(graph, edge)
fg.calculate_backward_message(graph, edge)
belief = fg.calculate_edge_marginal(graph, edge).to_moment()
print(f"Belief: mean={belief.m[0]:.3f}, variance={belief.V[0, 0]:.3f}")

# A new reading only invalidates what depends on it
graph.replace_node(fg.ConstantNode(fg.Gaussian(m=2.3, V=0.25), id="reading2"))
fg.calculate_forward_message(graph, edge)
belief = fg.calculate_edge_marginal(graph, edge).to_moment()
print(f"Updated belief: mean={belief.m[0]:.3f}, variance={belief.V[0, 0]:.3f}")
