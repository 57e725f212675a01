# settings.py
"""
Runtime configuration. Every value can be overridden through the environment,
which is how the tests pin delays to zero and the failure rate to 0 or 1.
"""
import os

DB_PATH = os.environ.get("CONTACTS_DB_PATH", "portfolio_contacts.db")

# Single key-value slot holding the JSON array of contacts
STORAGE_KEY = os.environ.get("CONTACTS_STORAGE_KEY", "portfolioContacts")

# Simulated latency in seconds
CREATE_DELAY = float(os.environ.get("CONTACTS_CREATE_DELAY", "1.5"))
MUTATE_DELAY = float(os.environ.get("CONTACTS_MUTATE_DELAY", "0.3"))

# Chance that a create fails with a synthetic server error (0.0 - 1.0)
FAILURE_PROBABILITY = float(os.environ.get("CONTACTS_FAILURE_PROBABILITY", "0.1"))

LOG_LEVEL = os.environ.get("CONTACTS_LOG_LEVEL", "INFO").upper()

# How long (ms) status messages stay visible in the window
MESSAGE_TIMEOUT_MS = int(os.environ.get("CONTACTS_MESSAGE_TIMEOUT_MS", "5000"))
