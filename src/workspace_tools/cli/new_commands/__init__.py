"""CLI commands implementing the Command protocol.

Modules in this package are auto-discovered by the registry.
Each module should export a class that implements the Command protocol
(name, help, aliases, add_arguments, run).
"""
