"""ghgantt - bidirectional sync between a local Gantt task repository and GitHub Projects."""

__version__ = "0.1.0"
