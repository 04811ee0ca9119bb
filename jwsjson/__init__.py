"""JWS JSON Serialization consumer and verification service."""

__version__ = "0.1.0"
