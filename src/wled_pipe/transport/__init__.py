"""Transports: serial, TCP and an in-memory mock."""

from .base import Pipe, Transport
from .mock_connection import MockTransport
from .network_connection import NetworkTransport
from .serial_connection import SerialTransport
