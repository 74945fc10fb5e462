"""layerx: resilient asynchronous API client.

Single-flight request dispatch with retries, multipart uploads and a tolerant
JSON envelope decoder, plus a small CLI for issuing requests by hand.
"""

__version__ = "0.1.0"
