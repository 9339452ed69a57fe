"""Use cases específicos de WhatsApp."""

from .dispatch_inbound_batch import InboundDispatchLoop, message_content, message_location
from .relay_received_message import EchoRelay
from .send_outbound_message import OutboundSender

__all__ = [
    # Inbound
    "InboundDispatchLoop",
    "message_content",
    "message_location",
    # Outbound
    "EchoRelay",
    "OutboundSender",
]
