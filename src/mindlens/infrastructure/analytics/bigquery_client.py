"""
BigQuery Analytics Client

Streams de-identified assessment records into BigQuery for research.
Only called for users who opted into research sharing.
"""

import asyncio
from typing import Optional

from google.api_core import exceptions as gcp_exceptions
from google.cloud import bigquery

from mindlens.config import get_settings
from mindlens.config.logging_config import get_logger
from mindlens.domain.errors import AnalyticsForwardError
from mindlens.domain.models.submission import DeidentifiedRecord
from mindlens.infrastructure.analytics.client import (
    AnalyticsClient,
    InsertResult,
    SeverityAggregate,
)

logger = get_logger(__name__)

AGGREGATE_QUERY = """
    SELECT
        severity_tier,
        primary_emotion,
        COUNT(*) AS count,
        AVG(phq_score) AS avg_score
    FROM `{table}`
    WHERE DATE(assessment_date) >= DATE_SUB(CURRENT_DATE(), INTERVAL 6 MONTH)
    GROUP BY severity_tier, primary_emotion
    ORDER BY severity_tier, primary_emotion
"""


class BigQueryAnalyticsClient(AnalyticsClient):
    """BigQuery implementation using streaming inserts."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        dataset_id: Optional[str] = None,
        table_id: Optional[str] = None,
    ) -> None:
        settings = get_settings()

        self._project_id = project_id or settings.analytics.project_id
        self._dataset_id = dataset_id or settings.analytics.dataset_id
        self._table_id = table_id or settings.analytics.table_id
        self._client: Optional[bigquery.Client] = None

    @property
    def backend_name(self) -> str:
        return "bigquery"

    @property
    def table_ref(self) -> str:
        return f"{self._project_id}.{self._dataset_id}.{self._table_id}"

    def _get_client(self) -> bigquery.Client:
        if self._client is None:
            self._client = bigquery.Client(project=self._project_id)
        return self._client

    async def insert(self, record: DeidentifiedRecord) -> InsertResult:
        row = record.to_row()
        try:
            errors = await asyncio.to_thread(
                self._get_client().insert_rows_json,
                self.table_ref,
                [row],
                row_ids=[record.record_id],
            )
        except gcp_exceptions.GoogleAPICallError as e:
            raise AnalyticsForwardError(str(e), original_error=e) from e

        if errors:
            logger.warning("BigQuery rejected row", table=self.table_ref, errors=errors)
            return InsertResult(success=False, error=str(errors))

        logger.info("Research record inserted", table=self.table_ref)
        return InsertResult(success=True)

    async def aggregate_by_severity(self) -> list[SeverityAggregate]:
        query = AGGREGATE_QUERY.format(table=self.table_ref)

        def _run() -> list[SeverityAggregate]:
            rows = self._get_client().query(query).result()
            return [
                SeverityAggregate(
                    severity_tier=row["severity_tier"],
                    primary_emotion=row["primary_emotion"],
                    count=int(row["count"]),
                    average_score=float(row["avg_score"]),
                )
                for row in rows
            ]

        return await asyncio.to_thread(_run)
