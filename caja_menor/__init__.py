"""Top-level package for the Caja Menor petty-cash tool.

The primary modules are:

* ``ledger`` – the movement store and its persistence
* ``balance`` – pure totals over a ledger snapshot
* ``forms`` – validation of raw form input into movement drafts
* ``report`` – printable HTML report and JSON export
* ``ui`` – Streamlit components used by the pages

To run the app from the command line you can execute:

```bash
streamlit run caja_menor/Home.py
```

or use ``run_caja_menor.py`` at the project root.
"""

from . import balance  # noqa: F401  # re-exported for convenience
from . import forms  # noqa: F401  # re-exported for convenience
from . import ledger  # noqa: F401  # re-exported for convenience
from . import report  # noqa: F401  # re-exported for convenience
from .errors import CajaMenorError, NotFoundError, PersistenceError, ValidationError
from .ledger import LedgerStore
from .models import Category, LedgerState, MovementDraft, MovementKind, MovementRecord
from .storage import JsonFileStorage, MemoryStorage

__all__ = [
    "balance",
    "forms",
    "ledger",
    "report",
    "CajaMenorError",
    "NotFoundError",
    "PersistenceError",
    "ValidationError",
    "LedgerStore",
    "Category",
    "LedgerState",
    "MovementDraft",
    "MovementKind",
    "MovementRecord",
    "JsonFileStorage",
    "MemoryStorage",
]
