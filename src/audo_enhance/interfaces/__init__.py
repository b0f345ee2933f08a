"""HTTP and command-line adapters."""
