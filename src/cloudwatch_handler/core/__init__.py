"""Core domain: events, batches, ports and errors."""
