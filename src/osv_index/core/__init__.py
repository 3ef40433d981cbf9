"""Domain model, ports, services and use cases. Nothing in here performs I/O."""
