"""Core Application Layer: the client entry point and CLI command handling.

Connects the domain layer with the infrastructure layer through interfaces.
"""
