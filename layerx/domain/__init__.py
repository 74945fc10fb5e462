"""Domain Layer: value objects, envelopes, errors, events and ports.

Has no dependency on the infrastructure layer.
"""
