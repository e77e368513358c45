"""
HealthAnalysisService - Health Metric Analysis

Reads stored health metrics and interprets them:
- aggregate analysis of the latest reading per metric type
- per-metric reports (blood pressure, blood sugar, BMI, heart rate) with
  optional trends over a look-back window

Never writes except record_metric(), which stores a validated reading.
"""

import logging
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError

from src.config import DEFAULT_ANALYSIS_DAYS
from src.db import queries
from src.exceptions import RecordNotFoundError, ValidationError
from src.models.health_metric import parse_health_metric
from src.utils import datetime_helpers
from src.utils.metric_interpretation import (
    STATUS_DANGER,
    STATUS_WARNING,
    analyze_blood_pressure,
    analyze_blood_sugar,
    analyze_bmi,
    analyze_heart_rate,
    interpret_value,
    worst_status,
)

logger = logging.getLogger(__name__)

# Metric types covered by the aggregate analysis, with their response keys
ANALYZED_METRICS = {
    "blood_pressure": "blood_pressure",
    "blood_sugar": "blood_sugar",
    "bmi": "bmi",
    "heart_rate": "heart_rate",
    "body_fat_percentage": "body_fat",
}


BLOOD_SUGAR_TREND_BAND = 5
WEIGHT_TREND_BAND_KG = 1


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like a calculator (2.5 -> 3), not banker's rounding"""
    factor = 10 ** digits
    result = int(value * factor + 0.5) if value >= 0 else -int(-value * factor + 0.5)
    return result / factor if digits else result


def _mean(values: List[float]) -> float:
    return sum(values) / len(values)


def trend_direction(delta: float, band: float) -> str:
    """increasing / decreasing when delta leaves the +-band, else stable"""
    if delta > band:
        return "increasing"
    if delta < -band:
        return "decreasing"
    return "stable"


def pluralize(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count > 1 else ''}"


class HealthAnalysisService:
    """
    Service for health metric interpretation.

    Responsibilities:
    - Storing validated metric readings
    - Aggregate health status across metric types
    - Per-metric analysis and trends
    """

    def __init__(self):
        logger.debug("HealthAnalysisService initialized")

    async def record_metric(self, user_id: str, data: Dict[str, Any]):
        """
        Validate and store one reading

        Raises:
            ValidationError: unknown metric_type or a value that does not fit it
        """
        payload = {**data, "user_id": user_id}
        if payload.get("measured_at") is None:
            payload["measured_at"] = datetime_helpers.now_utc()

        try:
            metric = parse_health_metric(payload)
        except PydanticValidationError as e:
            first = e.errors()[0]
            raise ValidationError(
                first.get("msg", "Invalid health metric"),
                field=".".join(str(part) for part in first.get("loc", ())) or "value",
                user_id=user_id,
                operation="record_metric"
            ) from e

        await queries.save_health_metric(metric)
        return metric

    async def _latest_or_404(self, user_id: str, metric_type: str, label: str):
        latest = await queries.get_latest_metric(user_id, metric_type)
        if latest is None:
            raise RecordNotFoundError(
                f"No {label} data found",
                record_type=f"{label} data",
                user_id=user_id,
                operation=f"get_{metric_type}_analysis"
            )
        return latest

    # ==========================================
    # Aggregate analysis
    # ==========================================

    async def get_health_analysis(self, user_id: str, days: int = DEFAULT_ANALYSIS_DAYS) -> Dict[str, Any]:
        """
        Interpret the latest reading of each analyzed metric type in the window

        Body fat is only interpreted when the user's profile has a gender.
        Blood sugar readings are treated as fasting.

        Returns:
            {
                'analyzed_at': datetime,
                'period': {'days', 'start', 'end'},
                'metrics': {key: {'latest', 'measured_at', 'category', 'status', ...}},
                'overall_status': 'normal' | 'warning' | 'danger',
                'summary': str
            }
        """
        now = datetime_helpers.now_utc()
        start = datetime_helpers.get_window_start(days, now)

        latest = {}
        for metric_type in ANALYZED_METRICS:
            metric = await queries.get_latest_metric(user_id, metric_type, since=start)
            if metric is not None:
                latest[metric_type] = metric

        gender = None
        if "body_fat_percentage" in latest:
            gender = await queries.get_user_gender(user_id)

        metrics = {}
        for metric_type, key in ANALYZED_METRICS.items():
            metric = latest.get(metric_type)
            if metric is None:
                continue
            if metric_type == "body_fat_percentage" and not gender:
                continue

            value = metric.value.model_dump()
            interpretation = interpret_value(metric_type, value, gender=gender)
            metrics[key] = {
                "latest": value,
                "measured_at": metric.measured_at,
                **interpretation,
            }

        statuses = [m["status"] for m in metrics.values()]
        danger_count = statuses.count(STATUS_DANGER)
        warning_count = statuses.count(STATUS_WARNING)
        overall_status = worst_status(statuses)

        if overall_status == STATUS_DANGER:
            summary = (
                f"{pluralize(danger_count, 'critical metric')} need immediate attention. "
                "Please consult a healthcare provider."
            )
        elif overall_status == STATUS_WARNING:
            summary = (
                f"{pluralize(warning_count, 'metric')} need attention. "
                "Consider lifestyle modifications."
            )
        else:
            summary = "All monitored metrics are in healthy ranges. Keep up the good work!"

        return {
            "analyzed_at": now,
            "period": {
                "days": days,
                "start": start.date().isoformat(),
                "end": now.date().isoformat(),
            },
            "metrics": metrics,
            "overall_status": overall_status,
            "summary": summary,
        }

    # ==========================================
    # Per-metric reports
    # ==========================================

    async def get_blood_pressure_analysis(
        self,
        user_id: str,
        days: int = DEFAULT_ANALYSIS_DAYS,
        include_history: bool = False
    ) -> Dict[str, Any]:
        latest = await self._latest_or_404(user_id, "blood_pressure", "blood pressure")
        reading = latest.value

        response = {
            "latest_reading": {
                "systolic": reading.systolic,
                "diastolic": reading.diastolic,
                "measured_at": latest.measured_at,
            },
            **analyze_blood_pressure(reading.systolic, reading.diastolic),
        }

        if include_history:
            history = await self._history(user_id, "blood_pressure", days)
            if history:
                systolic = [h.value.systolic for h in history]
                diastolic = [h.value.diastolic for h in history]
                response["trend"] = {
                    "readings": len(history),
                    "systolic": {
                        "average": round_half_up(_mean(systolic)),
                        "highest": max(systolic),
                        "lowest": min(systolic),
                    },
                    "diastolic": {
                        "average": round_half_up(_mean(diastolic)),
                        "highest": max(diastolic),
                        "lowest": min(diastolic),
                    },
                    "history": [
                        {
                            "systolic": h.value.systolic,
                            "diastolic": h.value.diastolic,
                            "measured_at": h.measured_at,
                        }
                        for h in history
                    ],
                }

        return response

    async def get_diabetes_risk(
        self,
        user_id: str,
        days: int = DEFAULT_ANALYSIS_DAYS,
        include_history: bool = False,
        is_fasting: bool = True
    ) -> Dict[str, Any]:
        """
        Blood sugar assessment

        Trend direction compares the mean of the last three readings against
        the mean of the first three, with a +-5 mg/dL stable band.
        """
        latest = await self._latest_or_404(user_id, "blood_sugar", "blood sugar")
        value = latest.value.mg_dL

        response = {
            "latest_reading": {
                "value": value,
                "measured_at": latest.measured_at,
                "type": "fasting" if is_fasting else "random",
            },
            **analyze_blood_sugar(value, is_fasting=is_fasting),
        }

        if include_history:
            history = await self._history(user_id, "blood_sugar", days)
            if history:
                values = [h.value.mg_dL for h in history]
                direction = "stable"
                if len(values) >= 2:
                    direction = trend_direction(
                        _mean(values[-3:]) - _mean(values[:3]),
                        BLOOD_SUGAR_TREND_BAND
                    )
                response["trend"] = {
                    "average": round_half_up(_mean(values)),
                    "readings": len(values),
                    "direction": direction,
                    "history": [
                        {"value": h.value.mg_dL, "measured_at": h.measured_at}
                        for h in history
                    ],
                }

        return response

    async def get_bmi_analysis(
        self,
        user_id: str,
        days: int = DEFAULT_ANALYSIS_DAYS,
        include_history: bool = False
    ) -> Dict[str, Any]:
        """BMI assessment; the optional trend is over weight readings"""
        latest = await self._latest_or_404(user_id, "bmi", "BMI")
        bmi = latest.value.value

        response = {
            "latest_reading": {"value": bmi, "measured_at": latest.measured_at},
            **analyze_bmi(bmi),
        }

        if include_history:
            weights_history = await self._history(user_id, "weight", days)
            if weights_history:
                weights = [w.value.kg for w in weights_history]
                change = weights[-1] - weights[0] if len(weights) >= 2 else 0
                response["weight_trend"] = {
                    "average": round_half_up(_mean(weights), 1),
                    "readings": len(weights),
                    "direction": trend_direction(change, WEIGHT_TREND_BAND_KG),
                    "change": round_half_up(change, 1),
                    "history": [
                        {"weight": w.value.kg, "measured_at": w.measured_at}
                        for w in weights_history
                    ],
                }

        return response

    async def get_heart_rate_analysis(
        self,
        user_id: str,
        days: int = DEFAULT_ANALYSIS_DAYS,
        include_history: bool = False
    ) -> Dict[str, Any]:
        latest = await self._latest_or_404(user_id, "heart_rate", "heart rate")
        bpm = latest.value.bpm

        response = {
            "latest_reading": {"bpm": bpm, "measured_at": latest.measured_at},
            **analyze_heart_rate(bpm),
        }

        if include_history:
            history = await self._history(user_id, "heart_rate", days)
            if history:
                values = [h.value.bpm for h in history]
                response["trend"] = {
                    "average": round_half_up(_mean(values)),
                    "readings": len(values),
                    "highest": max(values),
                    "lowest": min(values),
                    "history": [
                        {"bpm": h.value.bpm, "measured_at": h.measured_at}
                        for h in history
                    ],
                }

        return response

    async def _history(self, user_id: str, metric_type: str, days: int) -> list:
        since = datetime_helpers.get_window_start(days, datetime_helpers.now_utc())
        return await queries.get_metric_history(user_id, metric_type, since)
