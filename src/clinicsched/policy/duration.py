# src/clinicsched/policy/duration.py
from __future__ import annotations

from clinicsched.schemas.models import DurationRule, EngineConfig, IssueKind, ValidationResult


class DurationPolicy:
    """
    @brief
    Per-procedure duration bounds and recommended granularity.

    @details
    Bounds are hard rules. Recommended slots are advisory only: a duration
    outside the set produces a warning and never blocks scheduling.
    Procedure types without a rule are accepted with a warning.
    """

    def __init__(self, cfg: EngineConfig) -> None:
        self.rules: dict[str, DurationRule] = dict(cfg.duration_rules)

    def rule_for(self, procedure_type: str) -> DurationRule | None:
        return self.rules.get(str(getattr(procedure_type, "value", procedure_type)))

    def default_duration(self, procedure_type: str) -> int | None:
        rule = self.rule_for(procedure_type)
        return rule.default_minutes if rule else None

    def validate(self, procedure_type: str, duration_minutes: int) -> ValidationResult:
        result = ValidationResult()
        ptype = str(getattr(procedure_type, "value", procedure_type))
        rule = self.rule_for(ptype)

        if rule is None:
            result.add_warning(
                IssueKind.UNKNOWN_PROCEDURE_TYPE,
                f"No duration rule for procedure type '{ptype}', using generic validation",
                procedure_type=ptype,
            )
            return result

        if duration_minutes < rule.min_minutes:
            result.add_error(
                IssueKind.DURATION_OUT_OF_RANGE,
                f"Minimum duration for {ptype} is {rule.min_minutes} minutes "
                f"(allowed {rule.min_minutes}-{rule.max_minutes})",
                procedure_type=ptype,
                duration_minutes=duration_minutes,
                min_minutes=rule.min_minutes,
                max_minutes=rule.max_minutes,
            )
        if duration_minutes > rule.max_minutes:
            result.add_error(
                IssueKind.DURATION_OUT_OF_RANGE,
                f"Maximum duration for {ptype} is {rule.max_minutes} minutes "
                f"(allowed {rule.min_minutes}-{rule.max_minutes})",
                procedure_type=ptype,
                duration_minutes=duration_minutes,
                min_minutes=rule.min_minutes,
                max_minutes=rule.max_minutes,
            )

        if duration_minutes not in rule.recommended_slots:
            slots = ", ".join(str(s) for s in sorted(rule.recommended_slots))
            result.add_warning(
                IssueKind.DURATION_NOT_RECOMMENDED,
                f"Recommended durations for {ptype}: {slots} minutes",
                procedure_type=ptype,
                duration_minutes=duration_minutes,
            )
        return result


__all__ = ["DurationPolicy"]
