"""copper_shared: code shared by the Copper PCB design Lambdas.

Provides:
    - Identity extraction from the platform client-principal header
    - Document ownership checks
    - Typed request errors mapped to HTTP status codes
    - The document store gateway (DynamoDB and in-memory)
    - HTTP API event parsing and JSON responses
"""

__version__ = "0.1.0"
