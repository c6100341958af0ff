"""
Display tables.

Immutable enum -> label mappings used by forms and dashboards.  Nothing in
the computation path reads these except ``contestation.resolve_reason``,
which stores the label of a predefined reason as the contestation text.
"""

from types import MappingProxyType

from rewards_kernel.domain.goals import GoalScope, GoalType
from rewards_kernel.domain.periods import GoalPeriod

SECTOR_LABELS = MappingProxyType({
    "TI": "Tecnologia da Informação",
    "RH": "Recursos Humanos",
    "LOGISTICA": "Logística",
    "FROTAS": "Frotas",
    "ABATE": "Abate",
    "DESOSSA": "Desossa",
    "MIUDOS": "Miúdos",
    "EXPEDICAO": "Expedição",
    "GERAL_GESTORES": "Geral Gestores",
    "FINANCEIRO": "Financeiro",
    "FISCAL_CONTABIL": "Fiscal/Contábil",
    "COMERCIAL": "Comercial",
    "COMPRA_GADO": "Compra de Gado",
    "ALMOXARIFADO": "Almoxarifado",
    "MANUTENCAO": "Manutenção",
    "LAVANDERIA": "Lavanderia",
    "COZINHA": "Cozinha",
})

GOAL_TYPE_LABELS = MappingProxyType({
    GoalType.NUMERIC: "Numérico (Quantidade)",
    GoalType.BOOLEAN_CHECKLIST: "Lista de Verificação",
    GoalType.TASK_COMPLETION: "Conclusão de Tarefa (Sim/Não)",
    GoalType.PERCENTAGE: "Porcentagem (%)",
})

PERIOD_LABELS = MappingProxyType({
    GoalPeriod.DAILY: "Diário",
    GoalPeriod.WEEKLY: "Semanal",
    GoalPeriod.MONTHLY: "Mensal",
    GoalPeriod.QUARTERLY: "Trimestral",
    GoalPeriod.YEARLY: "Anual",
})

SCOPE_LABELS = MappingProxyType({
    GoalScope.SECTOR: "Setorial",
    GoalScope.INDIVIDUAL: "Individual",
})

# Keyed by ContestationReason value
CONTESTATION_REASON_LABELS = MappingProxyType({
    "not_done": "Não foi feito",
    "incorrect_way": "Forma incorreta",
    "incomplete": "Incompleto",
    "poor_quality": "Qualidade insuficiente",
    "missing_proof": "Falta comprovação",
    "other": "Outro motivo",
})

CONTESTATION_STATUS_LABELS = MappingProxyType({
    "pending": "Pendente",
    "resolved": "Resolvida",
    "dismissed": "Dispensada",
})


def sector_label(sector_id: str) -> str:
    return SECTOR_LABELS.get(sector_id, sector_id)


def format_period_display(period: GoalPeriod | str) -> str:
    """Label of a period, or the raw value if it is unknown."""
    try:
        return PERIOD_LABELS[GoalPeriod(period)]
    except ValueError:
        return str(period)
