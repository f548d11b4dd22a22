"""Profile setup via interactive questionnaire."""

import questionary
from questionary import Style

from ...models.profile import GenderIdentity, Profile
from ...validation import ProfilePayload, parse_payload

# Custom style for questionnaire
custom_style = Style(
    [
        ("qmark", "fg:#e91e63 bold"),
        ("question", "bold"),
        ("answer", "fg:#f06292 bold"),
        ("pointer", "fg:#e91e63 bold"),
        ("highlighted", "fg:#e91e63 bold"),
        ("selected", "fg:#cc5454"),
        ("separator", "fg:#cc5454"),
        ("instruction", ""),
        ("text", ""),
    ]
)


def _number_validator(low: float, high: float, integer: bool = False):
    """Build a questionary validator for a bounded number."""

    def validate(text: str):
        try:
            value = int(text) if integer else float(text)
        except ValueError:
            return "Please enter a whole number" if integer else "Please enter a number"
        if not low <= value <= high:
            return f"Must be between {low:g} and {high:g}"
        return True

    return validate


def _scale_choices(low_label: str, high_label: str) -> list[questionary.Choice]:
    choices = []
    for score in range(1, 11):
        title = str(score)
        if score == 1:
            title += f" ({low_label})"
        elif score == 10:
            title += f" ({high_label})"
        choices.append(questionary.Choice(title, score))
    return choices


class ManualInputClient:
    """Interactive questionnaire for collecting a drinker profile."""

    async def collect_profile(self, existing: Profile | None = None) -> ProfilePayload:
        """Run interactive questionnaire and return a validated payload.

        Answers from ``existing`` are offered as defaults.
        """
        print("\n=== Drinker Profile Questionnaire ===\n")

        name = await questionary.text(
            "What should we call you? (optional)",
            default=existing.name if existing else "",
            style=custom_style,
        ).ask_async()

        height = await questionary.text(
            "Your height (in cm):",
            default=f"{existing.height_cm:g}" if existing else "",
            validate=_number_validator(80, 250),
            style=custom_style,
        ).ask_async()

        weight = await questionary.text(
            "Your body weight (in kg):",
            default=f"{existing.weight_kg:g}" if existing else "",
            validate=_number_validator(30, 250),
            style=custom_style,
        ).ask_async()

        age = await questionary.text(
            "Your age:",
            default=str(existing.age) if existing else "",
            validate=_number_validator(18, 99, integer=True),
            style=custom_style,
        ).ask_async()

        gender = await questionary.select(
            "Which best describes you? (used for body water estimates)",
            choices=[
                questionary.Choice("Female", GenderIdentity.FEMALE),
                questionary.Choice("Male", GenderIdentity.MALE),
                questionary.Choice("Non-binary", GenderIdentity.NONBINARY),
                questionary.Choice("Prefer to self-describe", GenderIdentity.CUSTOM),
            ],
            default=existing.gender_identity if existing else None,
            style=custom_style,
        ).ask_async()

        custom_label = ""
        if gender == GenderIdentity.CUSTOM:
            custom_label = await questionary.text(
                "How do you describe yourself?",
                default=existing.gender_custom_label if existing else "",
                style=custom_style,
            ).ask_async()

        tolerance = await questionary.select(
            "How well do you usually handle your drinks?",
            choices=_scale_choices("lightweight", "very high tolerance"),
            default=existing.tolerance_score if existing else 5,
            style=custom_style,
        ).ask_async()

        metabolism = await questionary.select(
            "How fast do you usually sober up?",
            choices=_scale_choices("very slowly", "very quickly"),
            default=existing.metabolism_score if existing else 5,
            style=custom_style,
        ).ask_async()

        target = await questionary.select(
            "How drunk do you want to get tonight? (0 = sober, 10 = blackout)",
            choices=[questionary.Choice(str(level), level) for level in range(0, 11)],
            default=int(existing.target_level) if existing else 5,
            style=custom_style,
        ).ask_async()

        medications = await questionary.confirm(
            "Are you taking any medication that interacts with alcohol?",
            default=existing.medications if existing else False,
            style=custom_style,
        ).ask_async()

        return parse_payload(
            ProfilePayload,
            {
                "name": name or "",
                "height_cm": height,
                "weight_kg": weight,
                "age": age,
                "gender_identity": gender,
                "gender_custom_label": custom_label or "",
                "medications": medications,
                "tolerance_score": tolerance,
                "metabolism_score": metabolism,
                "target_level": target,
            },
        )
