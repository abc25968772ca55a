# dairy_ledger/constants.py
APP_NAME = "Dairy Ledger"

DATA_DIR = "data"
DB_FILE_NAME = "dairy_ledger.db"
LOG_FILE_NAME = "dairy_ledger.log"

SCHEMA_VERSION = "1.0"
TABLE_SCHEMA_VERSION = "schema_version"

# Rate (currency per liter) given to newly created contacts.
DEFAULT_RATE = 200

# Quiet period before a burst of edits is written to storage.
DEBOUNCE_SECONDS = 0.8

# Inclusive upper day used for "as of end of month" comparisons.
MONTH_END_DAY = "31"
