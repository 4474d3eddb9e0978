"""transform_shared — Shared utilities for the transform Lambda.

Provides:
    - Service URI decoding/encoding and execute URL building
    - Execute API request metadata normalization
    - JSONata expression runner
    - Remote execute call with response diagnostics
    - Handler response envelope helpers
"""

__version__ = "1.0.0"
