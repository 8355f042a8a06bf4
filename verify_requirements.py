import time
from concurrent.futures import ThreadPoolExecutor

from tabulate import tabulate

import idgen_config
from global_id import GlobalIdGenerator, MAX_SERIAL_NUMBER, ONE_SECOND_MS, current_millis
from node_identity import FixedNodeIdSource

NODE_ID = 7


def _new_generator(node_id=NODE_ID):
    generator = GlobalIdGenerator(FixedNodeIdSource(node_id))
    generator.initialize()
    return generator


def test_startup_delay():
    """Check that initialize() blocks for at least one second.

    Returns:
        bool: True if the delay was honoured
    """
    print("Testing startup delay...")
    generator = GlobalIdGenerator(FixedNodeIdSource(NODE_ID))
    start = time.monotonic()
    generator.initialize()
    elapsed = time.monotonic() - start

    if elapsed < 1.0:
        print(f"FAILURE: initialize() returned after {elapsed:.3f}s")
        return False

    print(f"SUCCESS: initialize() took {elapsed:.3f}s")
    return True


def test_uniqueness(num_ids=idgen_config.VERIFY_UNIQUENESS_COUNT):
    """Check that ids issued from one thread are unique.

    Args:
        num_ids (int): Number of ids to generate

    Returns:
        bool: True if all ids are unique
    """
    print(f"Testing uniqueness of {num_ids} IDs...")
    generator = _new_generator()

    ids = set()
    for i in range(num_ids):
        id_val = generator.issue()
        if id_val in ids:
            print(f"FAILURE: Duplicate ID: {id_val} (0x{id_val:x}), i={i}")
            return False
        ids.add(id_val)

    print(f"SUCCESS: All {num_ids} IDs are unique")
    return True


def test_concurrent_uniqueness(workers=4, ids_per_worker=50000):
    """Check that ids issued from several threads at once are unique.

    Returns:
        bool: True if the union of all issued ids has no duplicates
    """
    print(f"Testing uniqueness with {workers} workers x {ids_per_worker} IDs...")
    generator = _new_generator()

    def issue_batch(count):
        return [generator.issue() for _ in range(count)]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        batches = list(executor.map(issue_batch, [ids_per_worker] * workers))

    unique_ids = set()
    for batch in batches:
        unique_ids.update(batch)

    expected = workers * ids_per_worker
    if len(unique_ids) != expected:
        print(f"FAILURE: {expected - len(unique_ids)} duplicate IDs found")
        return False

    print(f"SUCCESS: {expected} concurrent IDs are unique")
    return True


def test_field_layout(num_ids=1000):
    """Check the sign bit and that each id decodes to the expected fields.

    Returns:
        bool: True if every id decodes correctly
    """
    print("Testing sign bit and field layout...")
    generator = _new_generator()

    for _ in range(num_ids):
        issued_at = current_millis()
        id_val = generator.issue()
        parsed = GlobalIdGenerator.parse_id(id_val)

        if parsed["sign"] != 0 or id_val >= (1 << 63):
            print(f"FAILURE: ID has the top bit set: {id_val}")
            return False
        if parsed["node_id"] != generator.current_node_id():
            print(f"FAILURE: Node ID {parsed['node_id']} != {generator.current_node_id()}")
            return False
        if not 0 <= parsed["serial"] <= MAX_SERIAL_NUMBER:
            print(f"FAILURE: Serial out of range: {parsed['serial']}")
            return False
        if not 0 <= issued_at // ONE_SECOND_MS - parsed["seconds"] <= 1:
            print(f"FAILURE: Seconds field {parsed['seconds']} is not within a second of {issued_at}")
            return False

    print(f"SUCCESS: {num_ids} IDs decode correctly")
    return True


def test_generation_rate(target_rate=idgen_config.VERIFY_THROUGHPUT_TARGET,
                         count=idgen_config.VERIFY_THROUGHPUT_COUNT):
    """Check that one node issues ids at the required rate.

    Args:
        target_rate (int): Target IDs per second
        count (int): Number of ids to issue

    Returns:
        bool: True if the rate meets the target
    """
    print(f"Testing generation rate (target: {target_rate} IDs/sec)...")
    generator = _new_generator()

    start_time = time.perf_counter()
    total = 0
    for _ in range(count):
        total += generator.issue()
    elapsed = time.perf_counter() - start_time
    rate = count / elapsed

    print(f"Generated {count} IDs in {elapsed:.2f} seconds")
    print(f"Rate: {rate:.0f} IDs/sec")

    if rate < target_rate:
        print(f"FAILURE: Generation rate {rate:.0f} IDs/sec is below target {target_rate} IDs/sec")
        return False

    print(f"SUCCESS: Generation rate of {rate:.0f} IDs/sec exceeds target {target_rate} IDs/sec")
    return True


def run_all_tests():
    """Run every check and print a summary table."""
    print("===== VERIFYING GLOBAL ID GENERATOR REQUIREMENTS =====\n")

    checks = [
        ("Startup delay >= 1s", test_startup_delay),
        ("Unique IDs (single thread)", test_uniqueness),
        ("Unique IDs (concurrent)", test_concurrent_uniqueness),
        ("Sign bit and field layout", test_field_layout),
        ("Rate >= target", test_generation_rate),
    ]

    results = []
    for name, check in checks:
        passed = check()
        results.append([name, "PASS" if passed else "FAIL"])
        print()

    print(tabulate(results, headers=["Requirement", "Result"], tablefmt="grid"))

    if all(result == "PASS" for _, result in results):
        print("\n===== ALL REQUIREMENTS VERIFIED SUCCESSFULLY =====")
        return True
    return False


if __name__ == "__main__":
    run_all_tests()
