"""API Resilience Implementations.

Single-flight request coalescing and retries with linear backoff under a
per-attempt timeout.
Bounded Context: API Resilience
"""
