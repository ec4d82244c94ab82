from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import text
from sqlalchemy.engine import Connection

from ..domain.events import PredictionEvent


def insert_topic_prediction(conn: Connection, event: PredictionEvent) -> None:
    conn.execute(
        text(
            """
            INSERT INTO dbo.topic_predictions (
              topic, live_value, predicted_value, threshold, sample_timestamp,
              threshold_reached, threshold_reach_time, estimated_reach_time, created_at
            )
            VALUES (
              :topic, :live_value, :predicted_value, :threshold, :sample_timestamp,
              :threshold_reached, :threshold_reach_time, :estimated_reach_time, GETDATE()
            )
            """
        ),
        {
            "topic": event.topic,
            "live_value": event.live_value,
            "predicted_value": event.predicted_value,
            "threshold": event.threshold,
            "sample_timestamp": datetime.fromtimestamp(event.timestamp, tz=timezone.utc).replace(tzinfo=None),
            "threshold_reached": 1 if event.threshold_reached else 0,
            "threshold_reach_time": event.threshold_reach_time,
            "estimated_reach_time": event.estimated_reach_time,
        },
    )
