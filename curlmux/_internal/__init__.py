"""Internal modules for curlmux.

WARNING: This package contains system-level modules used by the client.
These are not intended for direct use in application code.

Modules:
    transfer - Batching, dispatch and demultiplexing of transfer tool runs
    http - Shared URL and header helpers
"""
