"""Unit tests for individual components in isolation.

Coverage:
    - streaming/: SSE framing, event decoding, transcript accumulation, relay
    - assistant/: Configuration loading and the upstream HTTP client
    - models/: Reference de-duplication and file normalization

Follows single responsibility per test function. Leverages pytest-check for
multiple assertions per test.
"""
