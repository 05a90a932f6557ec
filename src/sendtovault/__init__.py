"""SendToVault client: import emailed notes into a markdown vault."""

__version__ = "0.1.0"

from sendtovault.app import SendToVaultApp  # noqa: E402
from sendtovault.client import DownloadResponse, SendToVaultClient  # noqa: E402
from sendtovault.config import SyncConfig  # noqa: E402
from sendtovault.engine import PollResult, SyncEngine  # noqa: E402
from sendtovault.materializer import LocalVaultFS, NoteMaterializer, sanitize_title  # noqa: E402
from sendtovault.note import NoteRecord  # noqa: E402
from sendtovault.registration import register  # noqa: E402
from sendtovault.scheduler import PollScheduler  # noqa: E402
from sendtovault.state import BackoffState, Credentials, QuotaState, SyncCursor, SyncState  # noqa: E402
from sendtovault.store import CredentialStore  # noqa: E402
from sendtovault.ui import LogUI, SyncSnapshot, SyncUI  # noqa: E402

__all__ = [
    "__version__",
    "SendToVaultApp",
    "SendToVaultClient",
    "DownloadResponse",
    "SyncConfig",
    "SyncEngine",
    "PollResult",
    "PollScheduler",
    "NoteMaterializer",
    "LocalVaultFS",
    "sanitize_title",
    "NoteRecord",
    "register",
    "BackoffState",
    "Credentials",
    "QuotaState",
    "SyncCursor",
    "SyncState",
    "CredentialStore",
    "LogUI",
    "SyncSnapshot",
    "SyncUI",
]
