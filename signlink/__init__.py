"""
signlink: URL command protocol for wallet signing requests.

An external app opens ``<scheme>://<operation>?<params>``; the engine
parses it, asks a signer for a signature, and opens the caller's
callback URL with ``result=`` or ``error=`` appended.
"""

__version__ = "0.1.0"

from signlink.commands import (
    Command,
    CommandKind,
    InvalidRequest,
    SignMessage,
    SignPersonalMessage,
    SignTransaction,
    Transaction,
)
from signlink.config import EngineConfig, config_from_dict, load_config
from signlink.dispatcher import Dispatcher, DispatchResult
from signlink.encoder import ResultEncoder, append_query_item
from signlink.engine import SigningEngine
from signlink.errors import (
    ConfigError,
    ErrorFormat,
    ErrorKind,
    SignlinkError,
    SignlinkOperationalError,
)
from signlink.launcher import (
    BrowserLauncher,
    HttpxLauncher,
    RecordingLauncher,
    StdoutLauncher,
    URLLauncher,
    create_launcher,
)
from signlink.parser import parse
from signlink.signer import Signer, SigningOutcome

__all__ = [
    "BrowserLauncher",
    "Command",
    "CommandKind",
    "ConfigError",
    "DispatchResult",
    "Dispatcher",
    "EngineConfig",
    "ErrorFormat",
    "ErrorKind",
    "HttpxLauncher",
    "InvalidRequest",
    "RecordingLauncher",
    "ResultEncoder",
    "SignMessage",
    "SignPersonalMessage",
    "SignTransaction",
    "Signer",
    "SigningEngine",
    "SigningOutcome",
    "SignlinkError",
    "SignlinkOperationalError",
    "StdoutLauncher",
    "Transaction",
    "URLLauncher",
    "append_query_item",
    "config_from_dict",
    "create_launcher",
    "load_config",
    "parse",
]
