"""
pt-BR display labels and date formatting shared by the report and the prompts.
"""
from datetime import date, datetime
from typing import Optional, Union

from nutricare.core.domain.entities import ConsultationType, MealType, Sex

SEX_LABELS = {
    Sex.MALE: "Masculino",
    Sex.FEMALE: "Feminino",
    Sex.OTHER: "Outro",
}

CONSULTATION_TYPE_LABELS = {
    ConsultationType.INITIAL: "Consulta Inicial",
    ConsultationType.FOLLOW_UP: "Retorno",
    ConsultationType.GROUP: "Grupo",
    ConsultationType.HOSPITAL: "Hospitalar",
}

# Shorter variant used inside generation prompts
CONSULTATION_TYPE_SHORT_LABELS = {
    ConsultationType.INITIAL: "Inicial",
    ConsultationType.FOLLOW_UP: "Retorno",
    ConsultationType.GROUP: "Grupo",
    ConsultationType.HOSPITAL: "Hospitalar",
}

MEAL_TYPE_LABELS = {
    MealType.BREAKFAST: "Café da Manhã",
    MealType.MORNING_SNACK: "Lanche da Manhã",
    MealType.LUNCH: "Almoço",
    MealType.AFTERNOON_SNACK: "Lanche da Tarde",
    MealType.DINNER: "Jantar",
    MealType.SUPPER: "Ceia",
    MealType.OTHER: "Outro",
}


def format_date(value: Union[date, datetime]) -> str:
    """dd/mm/yyyy"""
    return value.strftime("%d/%m/%Y")


def format_datetime(value: datetime) -> str:
    """dd/mm/yyyy HH:MM"""
    return value.strftime("%d/%m/%Y %H:%M")


def format_optional_date(value: Optional[Union[date, datetime]], missing: str = "Não definida") -> str:
    return format_date(value) if value else missing


def sex_label(sex: Sex) -> str:
    return SEX_LABELS.get(sex, str(sex))


def consultation_type_label(kind: ConsultationType) -> str:
    return CONSULTATION_TYPE_LABELS.get(kind, str(kind))


def meal_type_label(kind: MealType) -> str:
    return MEAL_TYPE_LABELS.get(kind, str(kind))
