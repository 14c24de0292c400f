"""
workspace-tools: create new workspaces from generator collections.

This package exposes a ``new`` command that discovers the options of a
workspace generator from its JSON option schema, checks the local package
manager, and hands the work to a workflow engine.

Modules:
    cli: Command-line entry point, command protocol and registry
    engine: Workflow engine interface and the local JSON collection engine
    config: Hierarchical TOML configuration
    package_manager: Package manager detection and compatibility checks
    exceptions: Error hierarchy with context and suggestions

Quick Start::

    $ workspace-tools new my-app --dry-run
    $ wst n my-app --collection ./my-collection --skip-install
"""

__version__ = "0.2.0"

__all__ = ["__version__"]
