"""
Shared constants for the Remote File Shell.

This module contains all constants used across client and server components.
"""

# Network Configuration
DEFAULT_HOST = 'localhost'
DEFAULT_SERVER_HOST = '0.0.0.0'
DEFAULT_PORT = 5678
DEFAULT_TRANSFER_PORT = 8189

# Buffer Sizes
READ_BUFFER_SIZE = 512  # Bounded read for shell command lines
CHUNK_SIZE = 8 * 1024  # Transfer payload chunk
TOKEN_HEADER_SIZE = 2  # bytes for string token length header
LENGTH_FIELD_SIZE = 8  # bytes for payload length field

# Timeouts
ACCEPT_POLL_INTERVAL = 0.5  # seconds between transfer accept polls

# Worker pool for filesystem commands
DEFAULT_MAX_WORKERS = 4

# Filesystem
ROOT_DIR = 'storage'  # kept apart from the source packages
DEFAULT_USERNAME = 'User'
TEXT_ENCODING = 'utf-8'

# Logging
LOG_DIR = 'logs'
TRANSFER_LOG_FILE = 'file_transfers.log'

# Line terminator appended to every shell response
LINE_END = '\n\r'


class Responses:
    """Literal shell response lines."""
    HINT = 'Enter --help for support info' + LINE_END
    FILE_EXISTS = 'File already exist' + LINE_END
    ALREADY_IN_ROOT = 'You are already in root folder' + LINE_END
    CANT_READ = "Can't read file" + LINE_END
    NOT_FOUND = 'No such file or directory' + LINE_END
    OUTSIDE_ROOT = 'Path is outside of root folder' + LINE_END
    COPY_INTO_ITSELF = "Can't copy a directory into itself" + LINE_END


# Shell verbs and their help lines, in the order --help prints them
HELP_ENTRIES = [
    ('ls', 'view all files and directories'),
    ('mkdir [dirname]', 'create directory'),
    ('nick [name]', 'change nickname'),
    ('touch [filename]', 'create new file'),
    ('cat [filename]', 'print file content'),
    ('rm [file | directory]', 'delete file or directory'),
    ('cd [path]', 'moving through a folder'),
    ('copy [src] [target]', 'copy file or folder'),
    ('exit', 'close connection'),
]


# Transfer Tokens
class TransferTokens:
    # Client to Server
    UPLOAD = 'upload'
    DOWNLOAD = 'download'
    EXIT = 'exit'

    # Server to Client
    OK = 'OK'
    WRONG = 'WRONG'
    DONE = 'DONE'
    FILE_NOT_FOUND = 'FNF'
    FILE_FOUND = 'File found'
    UNKNOWN = 'UNKNOWN'
