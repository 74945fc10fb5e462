"""Domain Interfaces (Ports):

Contracts (Abstract Base Classes) the client layer expects from its
collaborators. Infrastructure provides concrete implementations.
"""
