"""
Oracle ADB handler module. All code reading the listing tables of the
Oracle Autonomous Data Warehouse goes through here.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

import pandas as pd
import oracledb

from config_loader import ADWConfig

logger = logging.getLogger(__name__)

Params = Optional[Union[Sequence, Mapping[str, Any]]]


class OracleADBClient:
    """
    Client for interacting with Oracle Autonomous Database (ADB).

    Responsibilities:
    - Execute SELECT queries and return results as pandas DataFrames
    - Convert result frames into JSON-ready records
    """

    def __init__(self, config: ADWConfig):
        self._config = config

    def _get_connection(self):
        return oracledb.connect(
            user=self._config.username,
            password=self._config.password,
            dsn=self._config.dsn,
            config_dir=self._config.config_dir,
            wallet_location=self._config.wallet_loc,
            wallet_password=self._config.wallet_pw,
        )

    def execute_query_df(self, query: str, params: Params = None) -> pd.DataFrame:
        """
        Execute a SELECT query and return results as a pandas DataFrame.

        Args:
            query (str): SQL SELECT query
            params: Bind parameters, positional or named

        Returns:
            pd.DataFrame: Query result
        """
        conn = self._get_connection()
        try:
            df = pd.read_sql(query, conn, params=params)
            logger.info("Query executed successfully, rows fetched: %d", len(df))
            return df
        except Exception:
            logger.error("Failed to execute SELECT query")
            raise
        finally:
            conn.close()

    def fetch_records(self, query: str, params: Params = None) -> List[Dict[str, Any]]:
        """
        Execute a SELECT query and return rows as dicts keyed by lower-case
        column name, with NULLs as None.
        """
        df = self.execute_query_df(query, params)
        df.columns = [str(column).lower() for column in df.columns]
        df = df.astype(object).where(pd.notnull(df), None)
        return df.to_dict(orient="records")
