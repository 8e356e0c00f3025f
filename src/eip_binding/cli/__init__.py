"""Command-line entry point for aws-eip-binding."""
