"""GitHub capability server.

Exposes a registry of GitHub operations ("capabilities") through a command-line
tool and a REST API that share one capability layer.
"""

__version__ = "0.1.0"
