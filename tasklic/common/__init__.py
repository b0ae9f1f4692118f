# Common utilities
from tasklic.common.crypto import FieldCipher as FieldCipher
from tasklic.common.crypto import compute_checksum as compute_checksum
from tasklic.common.logging_utils import setup_logger as setup_logger
from tasklic.common.mixins import Configurable as Configurable

__all__ = ["Configurable", "FieldCipher", "compute_checksum", "setup_logger"]
