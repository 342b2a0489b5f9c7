"""
Client runtime

Public API::

    from intervita.client import create_session, ConnectionMode

    session = create_session()
    await session.upload_document("cv.pdf", pdf_bytes)
    await session.set_connected(True, ConnectionMode.ENV)
    session.connection.transport_view()   # {serverUrl, token, shouldConnect}
"""

from intervita.client.connection import ConnectionBroker, ConnectionMode, ConnectionState
from intervita.client.notifications import ToastChannel, ToastMessage, ToastType
from intervita.client.session import InterviewSession, create_session

__all__ = [
    "ConnectionBroker",
    "ConnectionMode",
    "ConnectionState",
    "InterviewSession",
    "ToastChannel",
    "ToastMessage",
    "ToastType",
    "create_session",
]
