"""
Subcommands of the phxtree CLI.
"""
