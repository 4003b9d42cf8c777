"""
Utility package for Sound Companion

Shared helpers used by every other package:

- **logger**: console/file separated logging, colored console output and
  operation tracking for long-running work such as a sync pass
- **helpers**: file name, URL, size and timestamp helpers
"""

from .logger import (
    setup_logging,
    configure_from_settings,
    get_logger,
    get_current_log_file,
    OperationLogger,
    create_operation_logger,
)
from .helpers import (
    display_name,
    file_name_from_url,
    is_safe_file_name,
    format_file_size,
    format_timestamp,
    ensure_directory,
    parse_size,
)

__all__ = [
    # Logging
    'setup_logging',
    'configure_from_settings',
    'get_logger',
    'get_current_log_file',
    'OperationLogger',
    'create_operation_logger',

    # Helpers
    'display_name',
    'file_name_from_url',
    'is_safe_file_name',
    'format_file_size',
    'format_timestamp',
    'ensure_directory',
    'parse_size',
]
