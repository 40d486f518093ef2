"""IndexSense - Index advisor and ad-hoc SQL runner for MySQL and PostgreSQL."""

__version__ = "0.1.0"
__license__ = "MIT"

# Exception hierarchy (import first so other modules can use it)
from indexsense.exceptions import (
    IndexSenseError,
    ArgumentError,
    ConfigError,
    ConfigNotFoundError,
    ConfigInvalidError,
    DatabaseConnectionError,
    SchemaQueryError,
    OutputWriteError,
    StatementExecutionError,
)

from indexsense.advisor import (
    INDEXABLE_TYPES,
    IndexPlan,
    IndexStatement,
    index_name_for,
    plan_indexes,
    should_index,
)
from indexsense.column_types import normalize_type
from indexsense.config import (
    ConnectionParams,
    DBConnection,
    Settings,
    get_settings,
    load_connection_params,
    parse_env_file,
)
from indexsense.runner import (
    StatementOutcome,
    execute_statements,
    format_tsv,
    output_path_for,
    write_statements,
)

__all__ = [
    # Exception hierarchy
    "IndexSenseError",
    "ArgumentError",
    "ConfigError",
    "ConfigNotFoundError",
    "ConfigInvalidError",
    "DatabaseConnectionError",
    "SchemaQueryError",
    "OutputWriteError",
    "StatementExecutionError",
    # Configuration
    "ConnectionParams",
    "DBConnection",
    "Settings",
    "get_settings",
    "load_connection_params",
    "parse_env_file",
    # Advisor
    "INDEXABLE_TYPES",
    "IndexPlan",
    "IndexStatement",
    "index_name_for",
    "normalize_type",
    "plan_indexes",
    "should_index",
    # Runner
    "StatementOutcome",
    "execute_statements",
    "format_tsv",
    "output_path_for",
    "write_statements",
    # Metadata
    "__version__",
    "__license__",
]
