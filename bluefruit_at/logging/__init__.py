"""Communication logging module.

Records every AT command, reply and serial port event for debugging
sessions with the module.
"""

from bluefruit_at.logging.log_models import LogEntry
from bluefruit_at.logging.file_handler import FileHandler
from bluefruit_at.logging.communication_logger import CommunicationLogger

__all__ = ['LogEntry', 'FileHandler', 'CommunicationLogger']
