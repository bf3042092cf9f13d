"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.graph_mail_connector import GraphMailConnector, MailAuthenticationError
from app.connectors.mail_source import MailSource

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "GraphMailConnector",
    "MailAuthenticationError",
    "MailSource",
]
