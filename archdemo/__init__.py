"""archdemo: provision the graffiti wall demo onto an Arch network node."""

__version__ = "0.1.0"
