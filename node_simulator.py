import logging
import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor

from tabulate import tabulate

import idgen_config
from global_id import GlobalIdGenerator
from node_identity import MAX_NODE_ID, FixedNodeIdSource

logging.basicConfig(level=getattr(logging, idgen_config.LOG_LEVEL), format=idgen_config.LOG_FORMAT)
logger = logging.getLogger(__name__)


class FleetSimulator:
    """Simulates a fleet of nodes, each running its own generator.

    Every node gets a distinct node id and is hit by several caller threads at
    once, so the run exercises both the per-node lock and the node id field.
    """

    def __init__(self, num_nodes=idgen_config.SIMULATOR_NODES, threads_per_node=2, first_node_id=0):
        """
        Args:
            num_nodes (int): Number of nodes to simulate
            threads_per_node (int): Concurrent callers per node
            first_node_id (int): Node id of the first node; the rest follow sequentially
        """
        if num_nodes < 1:
            raise ValueError("Simulator needs at least one node")
        if first_node_id + num_nodes - 1 > MAX_NODE_ID:
            raise ValueError("Not enough node ids for the requested fleet size")

        self.num_nodes = num_nodes
        self.threads_per_node = threads_per_node
        self.generators = {
            node_id: GlobalIdGenerator(FixedNodeIdSource(node_id))
            for node_id in range(first_node_id, first_node_id + num_nodes)
        }
        self.generated_ids = []
        self.id_lock = threading.Lock()

    def start(self):
        """Initialize every node in parallel (each one waits a second)."""
        logger.info(f"Starting {self.num_nodes} nodes")
        with ThreadPoolExecutor(max_workers=self.num_nodes) as executor:
            list(executor.map(lambda g: g.initialize(), self.generators.values()))

    def _worker(self, work_item):
        node_id, count = work_item
        generator = self.generators[node_id]
        results = [generator.issue() for _ in range(count)]

        with self.id_lock:
            self.generated_ids.extend(results)
        return results

    def simulate_load(self, ids_per_node=idgen_config.SIMULATOR_IDS_PER_NODE):
        """Issue ids from every node concurrently.

        Args:
            ids_per_node (int): Number of ids to issue per node, split across its threads

        Returns:
            list: All ids issued during this call
        """
        per_thread, remainder = divmod(ids_per_node, self.threads_per_node)
        work_items = []
        for node_id in self.generators:
            for i in range(self.threads_per_node):
                work_items.append((node_id, per_thread + (1 if i < remainder else 0)))

        with ThreadPoolExecutor(max_workers=len(work_items)) as executor:
            all_ids = list(executor.map(self._worker, work_items))

        return [id_val for sublist in all_ids for id_val in sublist]

    def summary(self):
        """Compute duplicate and distribution statistics over everything issued so far."""
        parsed = [GlobalIdGenerator.parse_id(id_val) for id_val in self.generated_ids]
        unique_ids = {p["id"] for p in parsed}

        by_node = defaultdict(int)
        seconds_by_node = defaultdict(set)
        max_serial_by_node = defaultdict(int)
        for p in parsed:
            by_node[p["node_id"]] += 1
            seconds_by_node[p["node_id"]].add(p["seconds"])
            max_serial_by_node[p["node_id"]] = max(max_serial_by_node[p["node_id"]], p["serial"])

        return {
            "total": len(parsed),
            "unique": len(unique_ids),
            "duplicates": len(parsed) - len(unique_ids),
            "negative": sum(1 for p in parsed if p["sign"]),
            "by_node": dict(by_node),
            "seconds_by_node": {k: len(v) for k, v in seconds_by_node.items()},
            "max_serial_by_node": dict(max_serial_by_node),
        }

    def display_results(self, limit=10):
        """Print a sample of ids and the fleet statistics.

        Args:
            limit (int): Maximum number of ids to display
        """
        sample = sorted(self.generated_ids)[:limit]
        table_data = []
        for id_val in sample:
            p = GlobalIdGenerator.parse_id(id_val)
            table_data.append([p["id"], p["generated_time"], p["node_id"], p["serial"]])

        print("\n=== Sample Generated IDs ===")
        print(tabulate(table_data, headers=["ID", "Generated Time", "Node ID", "Serial"], tablefmt="grid"))

        stats = self.summary()
        print("\n=== Statistics ===")
        print(f"Total IDs generated: {stats['total']}")
        print(f"Unique IDs: {stats['unique']}")
        print(f"Duplicate IDs: {stats['duplicates']}")

        if stats["duplicates"] or stats["negative"]:
            print(f"WARNING: {stats['duplicates']} duplicate and {stats['negative']} negative IDs found!")
        else:
            print("SUCCESS: All IDs are unique and non-negative!")

        node_table = [
            [node_id, count, stats["seconds_by_node"][node_id], stats["max_serial_by_node"][node_id]]
            for node_id, count in sorted(stats["by_node"].items())
        ]
        print("\n=== Distribution by Node ===")
        print(tabulate(node_table, headers=["Node ID", "IDs", "Distinct Seconds", "Max Serial"], tablefmt="grid"))


def run_simulation(num_nodes=idgen_config.SIMULATOR_NODES, ids_per_node=idgen_config.SIMULATOR_IDS_PER_NODE):
    simulator = FleetSimulator(num_nodes=num_nodes)
    simulator.start()

    print(f"Simulating {num_nodes} nodes, {ids_per_node} IDs each...")
    simulator.simulate_load(ids_per_node=ids_per_node)
    simulator.display_results(limit=10)

    print("\nBurst test (high concurrency)...")
    simulator.simulate_load(ids_per_node=ids_per_node * 20)
    print(f"Total IDs after burst test: {len(simulator.generated_ids)}")
    return simulator


if __name__ == "__main__":
    try:
        run_simulation()
        print("\nSimulation complete!")
    except Exception as e:
        logger.error(f"Error in simulation: {e}")
