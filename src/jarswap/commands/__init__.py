"""Command handlers: setup_parser(parser) and execute(args) -> exit code."""
