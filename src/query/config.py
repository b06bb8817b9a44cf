"""
Configuration defaults for running queries.

Values come from the environment (optionally a .env file) and are only
used as defaults by the command-line script; the query service receives
everything explicitly through a QueryRequest.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

TRUE_VALUES = ("1", "true", "yes", "on")


@dataclass
class QueryConfig:
    """Configuration for query and update runs."""
    format: Optional[str] = None       # explicit result format for every query
    output_dir: str = ""               # where derived output files go (empty means cwd)
    use_graphs: bool = False           # load imports as named graphs
    log_level: str = "WARNING"
    catalog: Optional[str] = None      # XML catalog for import resolution

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "QueryConfig":
        """Build a configuration from ONTOLOGY_QUERY_* environment variables."""
        load_dotenv(env_file)
        return cls(
            format=os.getenv("ONTOLOGY_QUERY_FORMAT") or None,
            output_dir=os.getenv("ONTOLOGY_QUERY_OUTPUT_DIR", ""),
            use_graphs=parse_bool(os.getenv("ONTOLOGY_QUERY_USE_GRAPHS", "false")),
            log_level=os.getenv("ONTOLOGY_QUERY_LOG_LEVEL", "WARNING").upper(),
            catalog=os.getenv("ONTOLOGY_QUERY_CATALOG") or None,
        )


def parse_bool(value: str) -> bool:
    return value.strip().lower() in TRUE_VALUES
