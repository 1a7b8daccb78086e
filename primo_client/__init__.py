"""Primo client: request shaping and record normalization for Primo search APIs."""

from primo_client.domain.record import Record, RemoteRecord
from primo_client.main import PrimoClient

__all__ = ["PrimoClient", "Record", "RemoteRecord"]
