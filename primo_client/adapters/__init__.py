"""Adapters layer for the Primo client.

Adapters turn external representations (XML fragments, response envelopes)
into domain models and domain configuration into wire payloads.
"""

from primo_client.adapters.record_normalizer import RecordNormalizer
from primo_client.adapters.remote_record_fetcher import RemoteRecordFetcher
from primo_client.adapters.request_builder import RequestBuilder

__all__ = ["RecordNormalizer", "RemoteRecordFetcher", "RequestBuilder"]
