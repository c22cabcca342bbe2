"""
External service clients for the catalog sync service.
"""

from .auth import Credential, CrmTokenProvider
from .crm_client import CrmClient, CrmEndpoints, CrmResponse
from .sql_source import SqlRowSource

__all__ = [
    'Credential',
    'CrmTokenProvider',
    'CrmClient',
    'CrmEndpoints',
    'CrmResponse',
    'SqlRowSource',
]
