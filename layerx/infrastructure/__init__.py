"""Infrastructure Layer: Contains concrete implementations and adapters.

HTTP transport (httpx), retry and single-flight dispatch, response decoding,
token stores, configuration, logging and the console display.
"""
