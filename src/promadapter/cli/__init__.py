"""
CLI commands for promadapter.
"""

from promadapter.cli.config_gen import config_gen_command
from promadapter.cli.explain import explain_command
from promadapter.cli.query import query_command
from promadapter.cli.validate import validate_command

__all__ = [
    "config_gen_command",
    "explain_command",
    "query_command",
    "validate_command",
]
