"""
Node identity sources for the global ID generator.

The generator asks a source for its node id once, at initialization time.
Every process running concurrently in the fleet must be given a different
value. Nothing in this module checks that: a production deployment should
provide a source backed by a real allocation mechanism (a coordination
service, a config management value, a broadcast claim, ...).
"""

import logging

import idgen_config

logger = logging.getLogger(__name__)

NODE_ID_BITS = 10
MAX_NODE_ID = (1 << NODE_ID_BITS) - 1  # 1023


def validate_node_id(node_id):
    """Check that a node id fits in the node id field.

    Args:
        node_id (int): Candidate node id

    Returns:
        int: The node id

    Raises:
        ValueError: If the value is not an integer in [0, 1023]
    """
    if isinstance(node_id, bool) or not isinstance(node_id, int):
        raise ValueError(f"Node ID must be an integer, got {node_id!r}")
    if node_id < 0 or node_id > MAX_NODE_ID:
        raise ValueError(f"Node ID must be between 0 and {MAX_NODE_ID}")
    return node_id


class NodeIdSource:
    """Base class for anything that can hand a node id to a generator."""

    def get_node_id(self):
        raise NotImplementedError


class FixedNodeIdSource(NodeIdSource):
    """Always returns the same node id. Proof-of-concept assignment."""

    def __init__(self, node_id=idgen_config.DEFAULT_NODE_ID):
        self.node_id = validate_node_id(node_id)

    def get_node_id(self):
        return self.node_id

    def __repr__(self):
        return f"FixedNodeIdSource(node_id={self.node_id})"


class EnvironmentNodeIdSource(NodeIdSource):
    """Reads the node id from GLOBAL_ID_NODE_ID (environment or .env file).

    Falls back to the default placeholder node id when the variable is unset.
    """

    def __init__(self, value=None):
        """
        Args:
            value (str, optional): Raw value to parse instead of the configured one
        """
        self.raw_value = idgen_config.NODE_ID if value is None else value

    def get_node_id(self):
        if self.raw_value is None or str(self.raw_value).strip() == "":
            logger.warning(
                f"GLOBAL_ID_NODE_ID not set, using placeholder node ID {idgen_config.DEFAULT_NODE_ID}"
            )
            return idgen_config.DEFAULT_NODE_ID

        try:
            node_id = int(str(self.raw_value).strip())
        except ValueError:
            raise ValueError(f"GLOBAL_ID_NODE_ID is not an integer: {self.raw_value!r}") from None

        return validate_node_id(node_id)

    def __repr__(self):
        return f"EnvironmentNodeIdSource(value={self.raw_value!r})"
