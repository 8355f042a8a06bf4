"""
Global ID generator.

Generates globally unique ids at a rate of at least 100K ids per second on
each node (process) it runs in, for up to 1024 nodes, with no coordination
service and no persisted state.

The 64-bit id layout is:

    63 62          53 52                                17 16               0
    +-+--------------+------------------------------------+------------------+
    |0| Node ID (10) |       Seconds since epoch (36)     |  Serial num (17) |
    +-+--------------+------------------------------------+------------------+

The top bit is always zero so ids stay positive as signed 64-bit integers.

Uniqueness within a node comes from the serial number, which increases
monotonically within each one-second window. No more than 2**17 - 1 ids are
handed out per window: when a window is exhausted the caller holding the lock
sleeps until the next window starts, and every other caller waits behind it.
That is the backpressure policy; it bounds the worst-case latency of
issue() to about one second.

initialize() waits one full second before a node issues anything, so a node
that crashes and restarts can never reuse a second it was issuing from
before the crash.

Known gaps, not handled here:
- two processes configured with the same node id will issue duplicates
- a wall clock that jumps backwards can regress the seconds field; this is
  logged as a warning and otherwise not corrected
"""

import logging
import threading
import time
from datetime import datetime, timezone

from node_identity import (
    NODE_ID_BITS,
    MAX_NODE_ID,
    EnvironmentNodeIdSource,
    validate_node_id,
)

logger = logging.getLogger(__name__)

SECONDS_BITS = 36
SERIAL_NUMBER_BITS = 17
MAX_SERIAL_NUMBER = (1 << SERIAL_NUMBER_BITS) - 1  # 131071
MAX_SECONDS = (1 << SECONDS_BITS) - 1

SECONDS_SHIFT = SERIAL_NUMBER_BITS
NODE_ID_SHIFT = 64 - (NODE_ID_BITS + 1)  # 53

ONE_SECOND_MS = 1000
STARTUP_DELAY_MS = 1000


class GlobalIdError(Exception):
    """Base exception for the global ID generator."""


class GeneratorStateError(GlobalIdError):
    """The generator is in a state where it cannot safely issue ids."""


class WaitInterruptedError(GeneratorStateError):
    """A mandatory wait was interrupted. The generator must not continue."""


def current_millis():
    """Wall-clock time in milliseconds since the Unix epoch."""
    return time.time_ns() // 1_000_000


class GlobalIdGenerator:
    """Thread-safe generator of 64-bit globally unique ids.

    One instance holds the state for one node. Share a single instance between
    every caller in the process; independent instances are only useful in
    tests and simulations where each is given its own node id.
    """

    def __init__(self, node_id_source=None, clock=current_millis, sleep=time.sleep):
        """
        Args:
            node_id_source (NodeIdSource, optional): Supplies the node id at
                initialization. Defaults to the GLOBAL_ID_NODE_ID setting.
            clock (callable): Returns wall-clock time in ms since the epoch
            sleep (callable): Blocks for the given number of seconds
        """
        self.node_id_source = node_id_source or EnvironmentNodeIdSource()
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()

        self._node_id = 0
        self._next_serial_number = 0    # Next serial number to assign within the current window
        self._last_interval_start = 0   # Time at which the current one second window started (ms)
        self._last_id_timestamp = 0     # Time at which the last id was issued (ms)
        self._initialized = False

    @property
    def initialized(self):
        return self._initialized

    def initialize(self):
        """Assign the node id and wait one second before coming into service.

        Safe to call again: the generator lock is held for the whole delay, so
        no id can be issued until a fresh second has started.

        Raises:
            ValueError: If the node id source returns an out of range value
            WaitInterruptedError: If the startup wait is interrupted
        """
        node_id = validate_node_id(self.node_id_source.get_node_id())

        with self._lock:
            self._initialized = False
            self._node_id = node_id
            self._wait(STARTUP_DELAY_MS, "initial startup")
            self._next_serial_number = 0
            self._last_interval_start = 0
            self._last_id_timestamp = 0
            self._initialized = True

        logger.info(f"GlobalId manager for node {node_id} initialized")

    def current_node_id(self):
        """Return the node id assigned at initialization."""
        return self._node_id

    def issue(self):
        """Return the next globally unique id.

        Should not be called more than 131071 times per second, but it will not
        fail if it is. Instead it blocks (for no more than one second) until a
        new window opens, and then returns an id.

        Returns:
            int: The next id as a non-negative 64-bit integer

        Raises:
            GeneratorStateError: If initialize() has not completed
            WaitInterruptedError: If the window-exhaustion wait is interrupted
        """
        with self._lock:
            if not self._initialized:
                raise GeneratorStateError("GlobalIdGenerator.issue() called before initialize()")

            now = self._clock()
            if now < self._last_id_timestamp:
                logger.warning(
                    f"Clock moved backwards by {self._last_id_timestamp - now} msec "
                    f"on node {self._node_id}; ids may repeat"
                )

            if self._next_serial_number >= MAX_SERIAL_NUMBER:
                now = self._wait_for_next_window(now)
                self._last_interval_start = now
                self._next_serial_number = 0
            elif now - self._last_id_timestamp > ONE_SECOND_MS:
                # Idle for over a second: a new window starts implicitly
                self._last_interval_start = now
                self._next_serial_number = 0

            self._last_id_timestamp = now

            serial_number = self._next_serial_number
            self._next_serial_number += 1

            return (
                (self._node_id << NODE_ID_SHIFT) |
                ((self._last_interval_start // ONE_SECOND_MS) << SECONDS_SHIFT) |
                serial_number
            )

    def _wait_for_next_window(self, now):
        """Block until a full second has passed since the current window started.

        Returns:
            int: The clock reading at which the new window starts
        """
        remaining = ONE_SECOND_MS - (now - self._last_interval_start)
        while remaining > 0:
            self._wait(remaining, "overflow")
            now = self._clock()
            remaining = ONE_SECOND_MS - (now - self._last_interval_start)
        return now

    def _wait(self, delay_ms, banner):
        logger.debug(f"Sleeping for {delay_ms} msec ({banner})")
        try:
            self._sleep(delay_ms / 1000.0)
        except InterruptedError as e:
            self._initialized = False
            raise WaitInterruptedError(f"Interrupted during sleep [{banner}]") from e
        except BaseException:
            # KeyboardInterrupt or an exception from a signal handler
            self._initialized = False
            raise

    @staticmethod
    def parse_id(global_id):
        """Parse an id back into its components.

        Args:
            global_id (int): The id to parse

        Returns:
            dict: A dictionary with the components of the id
        """
        if global_id < 0 or global_id >= (1 << 64):
            raise ValueError(f"Not a 64-bit unsigned id: {global_id}")

        seconds = (global_id >> SECONDS_SHIFT) & MAX_SECONDS
        try:
            generated_time = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime('%Y-%m-%d %H:%M:%S UTC')
        except (OverflowError, OSError, ValueError):
            generated_time = "out of range"

        return {
            "id": global_id,
            "sign": global_id >> 63,
            "node_id": (global_id >> NODE_ID_SHIFT) & MAX_NODE_ID,
            "seconds": seconds,
            "serial": global_id & MAX_SERIAL_NUMBER,
            "generated_time": generated_time,
        }


# Process-wide generator. Call init() once at process start before get_id().
default_generator = GlobalIdGenerator()


def init():
    """Initialize the default generator (blocks for one second)."""
    default_generator.initialize()


def get_id():
    """
    Generate a globally unique id using the default generator

    Returns:
        int: A unique 63-bit id
    """
    return default_generator.issue()


def current_node_id():
    """Node id of the default generator."""
    return default_generator.current_node_id()
