"""Stateless gateways, one module per platform resource.

Each function takes the session's ``ApiClient`` first and returns the decoded
response envelope.
"""

from clinicdesk.gateways._query import ALL, ListQuery

__all__ = ["ALL", "ListQuery"]
