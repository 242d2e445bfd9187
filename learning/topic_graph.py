"""
Topic Graph - Prerequisite DAG over the 12 C topics.

Features:
    - Prerequisite relationships as directed edges
    - Root cause tracing for weak topics
    - Ordered learning paths through weak prerequisites
"""

import networkx as nx
from typing import Dict, Iterable, List, Optional, Set, Tuple

from assessment.errors import InvalidArgument
from assessment.models import Topic, coerce_topic


# (prerequisite, dependent)
DEFAULT_PREREQUISITES: List[Tuple[Topic, Topic]] = [
    (Topic.C_BASICS, Topic.VARIABLES_DATATYPES),
    (Topic.C_BASICS, Topic.PREPROCESSOR),
    (Topic.VARIABLES_DATATYPES, Topic.OPERATORS_EXPRESSIONS),
    (Topic.VARIABLES_DATATYPES, Topic.ARRAYS_STRINGS),
    (Topic.OPERATORS_EXPRESSIONS, Topic.CONTROL_STRUCTURES),
    (Topic.CONTROL_STRUCTURES, Topic.FUNCTIONS),
    (Topic.CONTROL_STRUCTURES, Topic.ARRAYS_STRINGS),
    (Topic.ARRAYS_STRINGS, Topic.POINTERS),
    (Topic.FUNCTIONS, Topic.POINTERS),
    (Topic.FUNCTIONS, Topic.FILE_IO),
    (Topic.POINTERS, Topic.STRUCTURES_UNIONS),
    (Topic.POINTERS, Topic.MEMORY_MANAGEMENT),
    (Topic.POINTERS, Topic.FILE_IO),
    (Topic.STRUCTURES_UNIONS, Topic.MEMORY_MANAGEMENT),
    (Topic.MEMORY_MANAGEMENT, Topic.ADVANCED_C),
    (Topic.PREPROCESSOR, Topic.ADVANCED_C),
    (Topic.FILE_IO, Topic.ADVANCED_C),
]


class TopicGraph:
    """
    Directed Acyclic Graph of topics.

    An edge A -> B means A should be learned before B.
    """

    def __init__(self, edges: Optional[Iterable[Tuple[Topic, Topic]]] = None):
        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(Topic)

        for prereq, topic in (DEFAULT_PREREQUISITES if edges is None else edges):
            self.graph.add_edge(coerce_topic(prereq), coerce_topic(topic))

        if not nx.is_directed_acyclic_graph(self.graph):
            raise InvalidArgument("topic prerequisites contain a cycle")

    # ==================== Query Methods ====================

    def topological_order(self) -> List[Topic]:
        """All topics, prerequisites first (ties by topic index)."""
        return list(nx.lexicographical_topological_sort(self.graph, key=int))

    def prerequisites(self, topic: Topic) -> List[Topic]:
        """Immediate prerequisites (one level up)."""
        return sorted(self.graph.predecessors(coerce_topic(topic)))

    def all_prerequisites(self, topic: Topic) -> Set[Topic]:
        """ALL prerequisites recursively."""
        return nx.ancestors(self.graph, coerce_topic(topic))

    def dependents(self, topic: Topic) -> List[Topic]:
        """Topics that build directly on this one."""
        return sorted(self.graph.successors(coerce_topic(topic)))

    # ==================== Root Cause Analysis ====================

    def trace_root_cause(self, weak_topic: Topic, mastery: Dict[Topic, float],
                         threshold: float = 0.4) -> Topic:
        """
        Earliest weak prerequisite of a weak topic.

        Returns the topic itself when all its prerequisites are at or above
        the threshold.
        """
        weak_topic = coerce_topic(weak_topic)
        ancestors = self.all_prerequisites(weak_topic)

        for topic in self.topological_order():
            if topic in ancestors and mastery.get(topic, 0.5) < threshold:
                return topic
        return weak_topic

    def learning_path(self, target: Topic, mastery: Dict[Topic, float],
                      threshold: float = 0.6) -> List[Topic]:
        """
        Topics to study, in prerequisite order, before reaching target.

        Only includes topics (target included) with mastery below threshold.
        """
        target = coerce_topic(target)
        needed = self.all_prerequisites(target) | {target}
        return [t for t in self.topological_order()
                if t in needed and mastery.get(t, 0.5) < threshold]

    def depth(self, topic: Topic) -> int:
        """Length of the longest prerequisite chain ending at topic."""
        topic = coerce_topic(topic)
        ancestors = self.all_prerequisites(topic)
        if not ancestors:
            return 0
        return max(self.depth(p) for p in self.prerequisites(topic)) + 1
