"""
cert_registry — local certificate metadata registry.

Records certificate serial numbers, signers and component lists in a
single-file SQLite store, driven by an interactive shell or a one-shot CLI.

Built on a small Railway-Oriented Programming core (cert_registry.railway)
for explicit error handling at the storage boundary.
"""

__version__ = "0.1.0"
