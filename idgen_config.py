"""
Configuration settings for the global ID generator.
"""

import os

from dotenv import load_dotenv, find_dotenv

load_dotenv(find_dotenv(usecwd=True))

# Node identity
# Placeholder node id used until a real allocation mechanism assigns one
DEFAULT_NODE_ID = 1023
NODE_ID = os.getenv("GLOBAL_ID_NODE_ID")  # None = use DEFAULT_NODE_ID

# Logging settings
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Simulator settings
SIMULATOR_NODES = int(os.getenv("SIMULATOR_NODES", 4))
SIMULATOR_IDS_PER_NODE = int(os.getenv("SIMULATOR_IDS_PER_NODE", 1000))

# Verification settings
VERIFY_THROUGHPUT_TARGET = int(os.getenv("VERIFY_THROUGHPUT_TARGET", 100000))  # IDs/sec
VERIFY_THROUGHPUT_COUNT = int(os.getenv("VERIFY_THROUGHPUT_COUNT", 750000))
VERIFY_UNIQUENESS_COUNT = int(os.getenv("VERIFY_UNIQUENESS_COUNT", 500000))
