"""User profile data models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class GenderIdentity(str, Enum):
    """Gender identity as used by the body-composition formulas.

    Only FEMALE and MALE select a dedicated formula; NONBINARY and CUSTOM
    both use the blended one. The free-text label of CUSTOM lives on the
    profile and never changes the numbers.
    """

    FEMALE = "female"
    MALE = "male"
    NONBINARY = "nonbinary"
    CUSTOM = "custom"


@dataclass
class Profile:
    """Physiological profile of a drinker."""

    user_id: str
    height_cm: float
    weight_kg: float
    age: int
    gender_identity: GenderIdentity
    tolerance_score: int = 5  # 1-10, self-rated
    metabolism_score: int = 5  # 1-10, self-rated
    target_level: float = 5
    name: str = ""
    gender_custom_label: str = ""
    medications: bool = False
    bmi: float | None = None
    total_body_water_l: float | None = None
    id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_body_metrics(self) -> bool:
        """Whether BMI and total body water are already cached."""
        return self.bmi is not None and self.total_body_water_l is not None

    def to_dict(self) -> dict:
        """Convert to dictionary for storage."""
        return {
            "user_id": self.user_id,
            "name": self.name,
            "height_cm": self.height_cm,
            "weight_kg": self.weight_kg,
            "age": self.age,
            "gender_identity": self.gender_identity.value,
            "gender_custom_label": self.gender_custom_label,
            "tolerance_score": self.tolerance_score,
            "metabolism_score": self.metabolism_score,
            "target_level": self.target_level,
            "medications": self.medications,
            "bmi": self.bmi,
            "total_body_water_l": self.total_body_water_l,
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "Profile":
        """Create from dictionary."""
        return cls(
            id=id,
            user_id=data["user_id"],
            name=data.get("name", ""),
            height_cm=data["height_cm"],
            weight_kg=data["weight_kg"],
            age=data["age"],
            gender_identity=GenderIdentity(data["gender_identity"]),
            gender_custom_label=data.get("gender_custom_label", ""),
            tolerance_score=data.get("tolerance_score", 5),
            metabolism_score=data.get("metabolism_score", 5),
            target_level=data.get("target_level", 5),
            medications=bool(data.get("medications", False)),
            bmi=data.get("bmi"),
            total_body_water_l=data.get("total_body_water_l"),
            created_at=created_at,
            updated_at=updated_at,
        )

    def get_summary(self) -> str:
        """Generate a short human-readable summary."""
        gender = self.gender_identity.value
        if self.gender_identity == GenderIdentity.CUSTOM and self.gender_custom_label:
            gender = self.gender_custom_label

        summary = f"User: {self.name or self.user_id}\n"
        summary += f"Body: {self.height_cm:g} cm, {self.weight_kg:g} kg, age {self.age}, {gender}\n"
        summary += f"Tolerance: {self.tolerance_score}/10, metabolism: {self.metabolism_score}/10\n"
        summary += f"Target level: {self.target_level:g}\n"

        if self.has_body_metrics:
            summary += f"BMI: {self.bmi:.1f}, total body water: {self.total_body_water_l:.1f} L\n"

        return summary
