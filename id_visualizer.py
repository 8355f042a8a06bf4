import sys

from global_id import GlobalIdGenerator
from node_identity import FixedNodeIdSource


def visualize_binary(global_id):
    """Print a global id in binary, split into its fields.

    Args:
        global_id (int): The id to visualize
    """
    binary = bin(global_id)[2:].zfill(64)

    # Split the binary string into its components
    sign_bit = binary[0]
    node_bits = binary[1:11]
    seconds_bits = binary[11:47]
    serial_bits = binary[47:]

    print(f"\n=== Binary Representation of ID: {global_id} ===\n")
    print(f"Sign bit       (1): {sign_bit}")
    print(f"Node ID       (10): {node_bits}")
    print(f"Seconds       (36): {seconds_bits}")
    print(f"Serial number (17): {serial_bits}")

    print("\n=== Decimal Values ===\n")
    print(f"Sign bit       : {int(sign_bit, 2)}")
    print(f"Node ID        : {int(node_bits, 2)}")
    print(f"Seconds        : {int(seconds_bits, 2)}")
    print(f"Serial number  : {int(serial_bits, 2)}")

    print("\n=== Visual Bit Allocation ===\n")
    print("MSB                                                                LSB")
    print("┌─┬──────────┬────────────────────────────────────┬─────────────────┐")
    print("│0│ Node(10) │        Seconds since epoch (36)    │   Serial (17)   │")
    print("└─┴──────────┴────────────────────────────────────┴─────────────────┘")
    print(" ↑  ↑                     ↑                            ↑")
    print(" 63 53                    17                           0")

    parsed = GlobalIdGenerator.parse_id(global_id)
    print("\n=== Parsed ID ===\n")
    for key, value in parsed.items():
        print(f"{key.replace('_', ' ').title()}: {value}")


def generate_sample_id(node_id=1):
    """Initialize a throwaway generator and issue one id from it."""
    generator = GlobalIdGenerator(FixedNodeIdSource(node_id))
    generator.initialize()
    return generator.issue()


def main():
    """Generate or read an id and visualize it."""
    if len(sys.argv) > 1:
        try:
            global_id = int(sys.argv[1])
            if global_id < 0 or global_id >= (1 << 64):
                raise ValueError
        except ValueError:
            print(f"Error: '{sys.argv[1]}' is not a valid 64-bit integer ID")
            sys.exit(1)
        visualize_binary(global_id)
    else:
        print("No ID provided. Generating a new ID...")
        global_id = generate_sample_id()
        print(f"Generated ID: {global_id}")
        visualize_binary(global_id)

        print("\n=== Usage ===")
        print("Run with an existing ID to visualize:")
        print(f"python {sys.argv[0]} <global_id>")


if __name__ == "__main__":
    main()
