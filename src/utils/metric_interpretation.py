"""
Health metric interpretation

Stateless threshold classifiers. Each returns a dict with:
- category: label of the band the reading falls in
- status: normal / warning / danger
- interpretation: one sentence describing the reading
- recommendations: list of next steps

Bands are checked top-down and the first match wins, so the order of each
table matters.
"""

from typing import Callable, List, Optional, Tuple

STATUS_NORMAL = "normal"
STATUS_WARNING = "warning"
STATUS_DANGER = "danger"

# Severity used to fold many readings into one overall status
STATUS_SEVERITY = {STATUS_NORMAL: 0, STATUS_WARNING: 1, STATUS_DANGER: 2}


def format_number(value: float) -> str:
    """Render 120.0 as '120' and 22.5 as '22.5'"""
    return f"{value:g}"


def _result(category: str, status: str, interpretation: str, recommendations: List[str]) -> dict:
    return {
        "category": category,
        "status": status,
        "interpretation": interpretation,
        "recommendations": list(recommendations),
    }


# ==========================================
# Blood pressure
# ==========================================

def analyze_blood_pressure(systolic: float, diastolic: float) -> dict:
    """
    Classify a blood pressure reading (mmHg)

    Examples:
        >>> analyze_blood_pressure(190, 130)["category"]
        'Hypertensive Crisis'
        >>> analyze_blood_pressure(120, 75)["category"]
        'Elevated'
    """
    reading = f"{format_number(systolic)}/{format_number(diastolic)} mmHg"

    if systolic > 180 or diastolic > 120:
        return _result(
            "Hypertensive Crisis", STATUS_DANGER,
            f"Your blood pressure of {reading} is dangerously high. "
            "This is a medical emergency. Seek immediate medical attention.",
            [
                "Seek emergency medical care immediately",
                "Do not wait to see if your pressure comes down on its own",
                "Call emergency services if experiencing chest pain, shortness of breath, or vision changes",
            ]
        )
    if systolic >= 140 or diastolic >= 90:
        return _result(
            "Hypertension Stage 2", STATUS_DANGER,
            f"Your blood pressure of {reading} indicates Stage 2 Hypertension. "
            "This requires medical intervention.",
            [
                "Consult with a healthcare provider as soon as possible",
                "Medication may be necessary",
                "Reduce sodium intake to less than 1,500mg per day",
                "Exercise regularly (150 minutes per week)",
                "Limit alcohol consumption",
                "Monitor blood pressure daily",
            ]
        )
    if systolic >= 130 or diastolic >= 80:
        return _result(
            "Hypertension Stage 1", STATUS_WARNING,
            f"Your blood pressure of {reading} indicates Stage 1 Hypertension. "
            "Lifestyle changes are recommended.",
            [
                "Schedule a check-up with your doctor",
                "Reduce sodium intake to less than 2,300mg per day",
                "Exercise regularly (150 minutes per week)",
                "Maintain a healthy weight",
                "Limit alcohol and quit smoking",
                "Monitor blood pressure weekly",
            ]
        )
    if systolic >= 120 and diastolic < 80:
        return _result(
            "Elevated", STATUS_WARNING,
            f"Your blood pressure of {reading} is elevated. "
            "Take action now to prevent progression to hypertension.",
            [
                "Adopt heart-healthy eating habits (DASH diet)",
                "Increase physical activity",
                "Reduce sodium intake",
                "Manage stress through relaxation techniques",
                "Monitor blood pressure monthly",
            ]
        )
    return _result(
        "Normal", STATUS_NORMAL,
        f"Your blood pressure of {reading} is in the normal range. Keep up the good work!",
        [
            "Maintain a healthy lifestyle",
            "Continue regular exercise",
            "Eat a balanced diet",
            "Monitor blood pressure periodically",
        ]
    )


# ==========================================
# Blood sugar
# ==========================================

def analyze_blood_sugar(value: float, is_fasting: bool = True) -> dict:
    """
    Classify a blood glucose reading (mg/dL)

    Fasting thresholds are 100 (prediabetes) and 126 (diabetes); random
    (non-fasting) thresholds are 140 and 200. The result carries an extra
    risk_level of Low / Moderate / High.
    """
    reading = f"{format_number(value)} mg/dL"

    if is_fasting:
        if value >= 126:
            result = _result(
                "Diabetes", STATUS_DANGER,
                f"Your fasting blood glucose level of {reading} indicates diabetes. "
                "This requires medical attention.",
                [
                    "Consult with a healthcare provider immediately",
                    "Get an HbA1c test to confirm diagnosis",
                    "Discuss treatment options including medication",
                    "Monitor blood sugar regularly",
                    "Follow a diabetes-friendly diet",
                    "Exercise regularly to improve insulin sensitivity",
                ]
            )
        elif value >= 100:
            result = _result(
                "Prediabetes", STATUS_WARNING,
                f"Your fasting blood glucose level of {reading} falls in the prediabetes range "
                "(100-125 mg/dL). This means your blood sugar is higher than normal but not "
                "high enough to be classified as diabetes.",
                [
                    "Schedule an HbA1c test with your doctor",
                    "Aim for 5-10% weight loss if overweight",
                    "Exercise at least 150 minutes per week",
                    "Reduce intake of sugary foods and refined carbs",
                    "Increase fiber intake (whole grains, vegetables)",
                    "Monitor blood sugar monthly",
                ]
            )
        else:
            result = _result(
                "Normal", STATUS_NORMAL,
                f"Your fasting blood glucose level of {reading} is in the normal range "
                "(less than 100 mg/dL).",
                [
                    "Maintain a balanced diet",
                    "Continue regular physical activity",
                    "Monitor blood sugar annually",
                    "Maintain a healthy weight",
                ]
            )
    else:
        if value >= 200:
            result = _result(
                "Diabetes", STATUS_DANGER,
                f"Your random blood glucose level of {reading} suggests diabetes, "
                "especially if accompanied by symptoms.",
                [
                    "Consult with a healthcare provider",
                    "Get a fasting glucose test for confirmation",
                    "Monitor for symptoms (increased thirst, frequent urination, fatigue)",
                ]
            )
        elif value >= 140:
            result = _result(
                "Prediabetes", STATUS_WARNING,
                f"Your random blood glucose level of {reading} is elevated. "
                "Consider getting a fasting glucose test.",
                [
                    "Schedule a fasting glucose test",
                    "Reduce sugar and refined carb intake",
                    "Increase physical activity",
                ]
            )
        else:
            result = _result(
                "Normal", STATUS_NORMAL,
                f"Your random blood glucose level of {reading} appears normal.",
                [
                    "Maintain healthy eating habits",
                    "Continue regular exercise",
                ]
            )

    result["risk_level"] = {
        STATUS_DANGER: "High",
        STATUS_WARNING: "Moderate",
        STATUS_NORMAL: "Low",
    }[result["status"]]
    return result


# ==========================================
# BMI
# ==========================================

# (lower bound inclusive, category, status, description, recommendations)
BMI_BANDS: List[Tuple[float, str, str, str, List[str]]] = [
    (40, "Obese Class III (Severe)", STATUS_DANGER,
     "indicates severe obesity. This significantly increases health risks.",
     [
         "Consult with a healthcare provider about weight management",
         "Consider medical weight loss programs",
         "Discuss bariatric surgery options if appropriate",
         "Work with a registered dietitian",
         "Start with low-impact exercises (walking, swimming)",
         "Address underlying health conditions",
     ]),
    (35, "Obese Class II", STATUS_DANGER,
     "indicates Class II obesity. Significant health risks are present.",
     [
         "Consult with a healthcare provider",
         "Create a structured weight loss plan",
         "Aim for gradual weight loss (1-2 lbs per week)",
         "Increase physical activity gradually",
         "Focus on portion control and nutrient-dense foods",
     ]),
    (30, "Obese Class I", STATUS_WARNING,
     "indicates Class I obesity. Health risks are elevated.",
     [
         "Set realistic weight loss goals (5-10% of body weight)",
         "Exercise at least 150 minutes per week",
         "Reduce calorie intake by 500-750 calories per day",
         "Keep a food diary to track eating habits",
         "Consider working with a nutritionist",
     ]),
    (25, "Overweight", STATUS_WARNING,
     "indicates you are overweight. Small lifestyle changes can help.",
     [
         "Aim for 5% weight loss as an initial goal",
         "Increase daily physical activity",
         "Choose whole foods over processed foods",
         "Practice portion control",
         "Stay hydrated and get adequate sleep",
     ]),
    (18.5, "Normal Weight", STATUS_NORMAL,
     "is in the healthy range. Maintain your current lifestyle.",
     [
         "Continue balanced eating habits",
         "Maintain regular physical activity",
         "Monitor weight periodically",
         "Focus on overall health, not just weight",
     ]),
    (float("-inf"), "Underweight", STATUS_WARNING,
     "indicates you are underweight. This may pose health risks.",
     [
         "Consult with a healthcare provider",
         "Increase calorie intake with nutrient-dense foods",
         "Eat more frequent, smaller meals",
         "Include healthy fats and proteins",
         "Rule out underlying medical conditions",
     ]),
]


def analyze_bmi(bmi: float) -> dict:
    """Classify a body mass index value"""
    for lower, category, status, description, recommendations in BMI_BANDS:
        if bmi >= lower:
            return _result(
                category, status,
                f"Your BMI of {format_number(bmi)} {description}",
                recommendations
            )
    raise ValueError(f"Unclassifiable BMI: {bmi}")


# ==========================================
# Resting heart rate
# ==========================================

# (upper bound inclusive, category, status, description, recommendations)
HEART_RATE_BANDS: List[Tuple[float, str, str, str, List[str]]] = [
    (60, "Athlete/Excellent", STATUS_NORMAL,
     "is excellent, typical of well-trained athletes.",
     [
         "Maintain your fitness routine",
         "Continue cardiovascular exercise",
         "Monitor for any sudden changes",
     ]),
    (65, "Excellent", STATUS_NORMAL, "is excellent.",
     ["Keep up your healthy lifestyle", "Continue regular exercise"]),
    (70, "Good", STATUS_NORMAL, "is good.",
     ["Maintain regular cardiovascular exercise", "Continue healthy habits"]),
    (75, "Average", STATUS_NORMAL, "is average.",
     [
         "Consider increasing cardiovascular exercise",
         "Aim for 150 minutes of moderate activity per week",
     ]),
    (80, "Below Average", STATUS_WARNING,
     "is below average. Improving cardiovascular fitness could help.",
     [
         "Increase aerobic exercise (walking, jogging, cycling)",
         "Start slowly and build up gradually",
         "Aim for 30 minutes of activity most days",
     ]),
    (float("inf"), "Poor", STATUS_WARNING,
     "is higher than ideal. This may indicate poor cardiovascular fitness or other issues.",
     [
         "Consult with a healthcare provider if consistently high",
         "Start a regular exercise program",
         "Reduce stress through relaxation techniques",
         "Limit caffeine and alcohol",
         "Ensure adequate sleep (7-9 hours)",
     ]),
]


def analyze_heart_rate(bpm: float) -> dict:
    """Classify a resting heart rate (beats per minute)"""
    for upper, category, status, description, recommendations in HEART_RATE_BANDS:
        if bpm <= upper:
            return _result(
                category, status,
                f"Your resting heart rate of {format_number(bpm)} bpm {description}",
                recommendations
            )
    raise ValueError(f"Unclassifiable heart rate: {bpm}")


# ==========================================
# Body fat percentage
# ==========================================

# Upper bounds (inclusive) for athletes / fitness / average; below essential_below is too low
BODY_FAT_THRESHOLDS = {
    "male": {"essential_below": 6, "athletes": 13, "fitness": 17, "average": 24},
    "female": {"essential_below": 14, "athletes": 20, "fitness": 24, "average": 31},
}

ESSENTIAL_FAT_NOTE = {
    "male": "This may not be sustainable or healthy long-term.",
    "female": "This may affect hormonal balance.",
}


def analyze_body_fat(percentage: float, gender: Optional[str]) -> dict:
    """
    Classify body fat percentage against gender-specific bands

    Any gender other than 'male' is evaluated against the female bands.
    """
    key = "male" if gender == "male" else "female"
    bands = BODY_FAT_THRESHOLDS[key]
    reading = f"Your body fat percentage of {format_number(percentage)}%"

    if percentage < bands["essential_below"]:
        return _result(
            "Essential Fat", STATUS_WARNING,
            f"{reading} is very low. {ESSENTIAL_FAT_NOTE[key]}",
            ["Consult with a healthcare provider", "Ensure adequate nutrition"]
        )
    if percentage <= bands["athletes"]:
        return _result(
            "Athletes", STATUS_NORMAL,
            f"{reading} is in the athletic range.",
            [
                "Maintain your fitness routine",
                "Ensure adequate nutrition for performance" if key == "male" else "Ensure adequate nutrition",
            ]
        )
    if percentage <= bands["fitness"]:
        return _result(
            "Fitness", STATUS_NORMAL,
            f"{reading} is in the fitness range.",
            ["Maintain healthy habits", "Continue regular exercise"]
        )
    if percentage <= bands["average"]:
        return _result(
            "Average", STATUS_NORMAL,
            f"{reading} is average.",
            ["Consider increasing exercise", "Focus on strength training"]
        )
    return _result(
        "Above Average", STATUS_WARNING,
        f"{reading} is above average.",
        [
            "Increase physical activity",
            "Focus on both cardio and strength training",
            "Review dietary habits",
        ]
    )


# Metric type -> classifier taking the stored value dict
def interpret_value(metric_type: str, value: dict, gender: Optional[str] = None) -> Optional[dict]:
    """Interpret a stored metric value; None for metric types with no classifier"""
    interpreters: dict[str, Callable[[dict], dict]] = {
        "blood_pressure": lambda v: analyze_blood_pressure(v["systolic"], v["diastolic"]),
        "blood_sugar": lambda v: analyze_blood_sugar(v["mg_dL"], is_fasting=True),
        "bmi": lambda v: analyze_bmi(v["value"]),
        "heart_rate": lambda v: analyze_heart_rate(v["bpm"]),
        "body_fat_percentage": lambda v: analyze_body_fat(v["percentage"], gender),
    }
    interpreter = interpreters.get(metric_type)
    return interpreter(value) if interpreter else None


def worst_status(statuses: List[str]) -> str:
    """danger > warning > normal; normal for an empty list"""
    return max(statuses, key=lambda s: STATUS_SEVERITY[s], default=STATUS_NORMAL)
