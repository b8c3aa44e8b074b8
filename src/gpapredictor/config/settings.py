from dataclasses import dataclass
import os
from dotenv import load_dotenv


load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    standard_attendance_max: float = float(os.getenv("GPA_STANDARD_ATTENDANCE_MAX", "5"))
    standard_cas_max: float = float(os.getenv("GPA_STANDARD_CAS_MAX", "30"))
    standard_midterm_max: float = float(os.getenv("GPA_STANDARD_MIDTERM_MAX", "20"))
    standard_final_max: float = float(os.getenv("GPA_STANDARD_FINAL_MAX", "50"))
    pass_percentage: float = float(os.getenv("GPA_PASS_PERCENTAGE", "40"))

    grade_scale: str = os.getenv("GPA_GRADE_SCALE", "ten_point")
    strict_marks: bool = _as_bool(os.getenv("GPA_STRICT_MARKS", "0"))

    data_path: str = os.getenv("GPA_DATA_PATH", "data/gpa-predictor-data.json")
    log_level: str = os.getenv("GPA_LOG_LEVEL", "INFO")


settings = Settings()
