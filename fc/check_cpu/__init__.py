"""CPU idle and I/O-wait check based on the sar family of tools."""
