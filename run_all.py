#!/usr/bin/env python3
"""
Unified entry point for the global ID generator project.
Allows running all components from a single script.
"""

import argparse
import logging
import sys

import idgen_config
from global_id import GlobalIdError

logging.basicConfig(level=getattr(logging, idgen_config.LOG_LEVEL), format=idgen_config.LOG_FORMAT)
logger = logging.getLogger("run_all")


def print_header(title):
    """Print a section header.

    Args:
        title (str): The title to print
    """
    width = 80
    print("\n" + "=" * width)
    print(f"{title:^{width}}")
    print("=" * width + "\n")


def run_id_generator(count=5):
    """Initialize the process-wide generator and issue a few ids."""
    import global_id

    print_header("GLOBAL ID GENERATOR")

    print("Initializing generator (waits one second)...")
    global_id.init()
    print(f"Node ID: {global_id.current_node_id()}")

    print(f"\nGenerating {count} IDs...")
    for i in range(count):
        id_val = global_id.get_id()
        parsed = global_id.GlobalIdGenerator.parse_id(id_val)
        print(f"ID {i+1}: {id_val}")
        print(f"  Second: {parsed['seconds']} ({parsed['generated_time']})")
        print(f"  Node: {parsed['node_id']}")
        print(f"  Serial: {parsed['serial']}\n")


def run_visualizer(id_val=None):
    """Run the ID visualizer.

    Args:
        id_val (int, optional): The ID to visualize
    """
    import id_visualizer

    print_header("GLOBAL ID VISUALIZER")

    if id_val is None:
        print("No ID provided. Generating a new ID...")
        id_val = id_visualizer.generate_sample_id()
        print(f"Generated ID: {id_val}")

    id_visualizer.visualize_binary(id_val)


def run_simulator(num_nodes, ids_per_node):
    """Run the fleet simulator."""
    import node_simulator

    print_header("FLEET SIMULATOR")
    node_simulator.run_simulation(num_nodes=num_nodes, ids_per_node=ids_per_node)


def run_verification():
    """Run the requirements verification checks."""
    import verify_requirements

    print_header("REQUIREMENTS VERIFICATION")
    return verify_requirements.run_all_tests()


def run_all_components(args):
    """Run all components in sequence."""
    print_header("RUNNING ALL COMPONENTS")

    run_id_generator()
    run_visualizer()
    run_simulator(args.nodes, args.ids_per_node)

    print("\nSkipping verification in all-components mode (takes too long).")
    print("Run with 'verify' to run verification checks separately.")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Global ID Generator Runner")
    subparsers = parser.add_subparsers(dest="component", help="Component to run")

    issue_parser = subparsers.add_parser("issue", help="Initialize the generator and issue IDs")
    issue_parser.add_argument("--count", type=int, default=5, help="Number of IDs to issue")

    vis_parser = subparsers.add_parser("visualize", help="Run ID visualizer")
    vis_parser.add_argument("--id", type=int, help="Specific ID to visualize")

    for name, help_text in (("simulate", "Run fleet simulator"), ("all", "Run all components in sequence")):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("--nodes", type=int, default=idgen_config.SIMULATOR_NODES, help="Number of nodes")
        sub.add_argument("--ids-per-node", type=int, default=idgen_config.SIMULATOR_IDS_PER_NODE,
                         help="IDs to issue per node")

    subparsers.add_parser("verify", help="Run requirements verification")

    args = parser.parse_args()

    try:
        if args.component == "issue":
            run_id_generator(args.count)
        elif args.component == "visualize":
            run_visualizer(args.id)
        elif args.component == "simulate":
            run_simulator(args.nodes, args.ids_per_node)
        elif args.component == "verify":
            if not run_verification():
                sys.exit(1)
        elif args.component == "all":
            run_all_components(args)
        else:
            parser.print_help()
    except (ValueError, GlobalIdError) as e:
        logger.error(f"{args.component} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
