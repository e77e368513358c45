"""Health metric models

The shape of `value` depends on `metric_type`, so each metric type gets its
own value model and the reading is a discriminated union keyed on
`metric_type`. Field names match what clients send (e.g. ``mg_dL``).
"""
from typing import Annotated, Literal, Optional, Union
from datetime import datetime
from uuid import UUID, uuid4
from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from src.utils.datetime_helpers import now_utc


class _MetricValue(BaseModel):
    model_config = ConfigDict(extra="forbid")


class BloodPressureValue(_MetricValue):
    systolic: float = Field(..., gt=0)
    diastolic: float = Field(..., gt=0)


class HeartRateValue(_MetricValue):
    bpm: float = Field(..., gt=0)


class WeightValue(_MetricValue):
    kg: float = Field(..., gt=0)


class BloodSugarValue(_MetricValue):
    mg_dL: float = Field(..., gt=0)


class StepsValue(_MetricValue):
    count: float = Field(..., ge=0)


class SleepHoursValue(_MetricValue):
    hours: float = Field(..., ge=0, le=24)


class WaterIntakeValue(_MetricValue):
    glasses: float = Field(..., ge=0)


class BodyFatValue(_MetricValue):
    percentage: float = Field(..., ge=0, le=100)


class MuscleMassValue(_MetricValue):
    kg: float = Field(..., gt=0)


class BMIValue(_MetricValue):
    value: float = Field(..., gt=0)


class _MetricBase(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    user_id: str
    notes: Optional[str] = Field(default=None, max_length=500)
    measured_at: datetime = Field(default_factory=now_utc)


class BloodPressureMetric(_MetricBase):
    metric_type: Literal["blood_pressure"] = "blood_pressure"
    value: BloodPressureValue


class HeartRateMetric(_MetricBase):
    metric_type: Literal["heart_rate"] = "heart_rate"
    value: HeartRateValue


class WeightMetric(_MetricBase):
    metric_type: Literal["weight"] = "weight"
    value: WeightValue


class BloodSugarMetric(_MetricBase):
    metric_type: Literal["blood_sugar"] = "blood_sugar"
    value: BloodSugarValue


class StepsMetric(_MetricBase):
    metric_type: Literal["steps"] = "steps"
    value: StepsValue


class SleepHoursMetric(_MetricBase):
    metric_type: Literal["sleep_hours"] = "sleep_hours"
    value: SleepHoursValue


class WaterIntakeMetric(_MetricBase):
    metric_type: Literal["water_intake"] = "water_intake"
    value: WaterIntakeValue


class BodyFatMetric(_MetricBase):
    metric_type: Literal["body_fat_percentage"] = "body_fat_percentage"
    value: BodyFatValue


class MuscleMassMetric(_MetricBase):
    metric_type: Literal["muscle_mass"] = "muscle_mass"
    value: MuscleMassValue


class BMIMetric(_MetricBase):
    metric_type: Literal["bmi"] = "bmi"
    value: BMIValue


HealthMetric = Annotated[
    Union[
        BloodPressureMetric,
        HeartRateMetric,
        WeightMetric,
        BloodSugarMetric,
        StepsMetric,
        SleepHoursMetric,
        WaterIntakeMetric,
        BodyFatMetric,
        MuscleMassMetric,
        BMIMetric,
    ],
    Field(discriminator="metric_type"),
]

METRIC_TYPES = [
    "blood_pressure", "heart_rate", "weight", "blood_sugar", "steps",
    "sleep_hours", "water_intake", "body_fat_percentage", "muscle_mass", "bmi",
]

health_metric_adapter: TypeAdapter = TypeAdapter(HealthMetric)


def parse_health_metric(data: dict):
    """Build the right metric variant from a raw dict (raises pydantic.ValidationError)"""
    return health_metric_adapter.validate_python(data)
