# Client-specific data adapters
# Each client module contains hardcoded logic specific to that client's export formats

from .sodimac_client import ParsedUpload, SodimacClientLoader

__all__ = ["ParsedUpload", "SodimacClientLoader"]
