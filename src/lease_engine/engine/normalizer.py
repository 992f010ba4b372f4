"""Input normalizer — raw lease record → ``LeaseTerms``.

Raw records come from the intake form, a CSV row or a stored contract, so
keys may be snake_case (``ibr_annual``), the form's PascalCase
(``IBR_Annual``) or a CSV header label (``IBR Annual``), and values are
often strings.

Coercion rules:
  - percentage-like fields: "12%" → 0.12, and values > 1 are whole percents (12 → 0.12)
  - numbers: '.' decimal point, optional ',' thousands groups ("100,000.50")
  - dates: ISO 8601 first, then a few day-first formats
  - empty / "NA" / "null" values count as absent

Every offending field is collected; ``LeaseValidationError`` is raised once
with the complete list.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from dateutil.parser import isoparse
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from lease_engine.config.lease import (
    DEFAULT_CURRENCY,
    DEFAULT_PAYMENT_TIMING,
    PERIODS_PER_YEAR,
    EscalationPolicy,
    LeaseTerms,
)
from lease_engine.errors import FieldIssue, IssueCode, LeaseValidationError

logger = logging.getLogger(__name__)

_EMPTY_TOKENS = {"", "na", "n/a", "null", "none", "-"}
_TRUE_TOKENS = {"true", "1", "yes", "y", "on"}
_FALSE_TOKENS = {"false", "0", "no", "n", "off"}

_NUMBER_RE = re.compile(r"^[+-]?(?:\d{1,3}(?:,\d{3})+|\d+)?(?:\.\d+)?$")
_DATE_FORMATS = ("%d/%m/%Y", "%d-%m-%Y", "%d.%m.%Y", "%d %b %Y", "%d %B %Y", "%b %d, %Y", "%B %d, %Y")

_FREQUENCY_ALIASES = {
    "monthly": "monthly", "month": "monthly", "m": "monthly", "12": "monthly",
    "quarterly": "quarterly", "quarter": "quarterly", "q": "quarterly", "4": "quarterly",
    "semi-annual": "semi-annual", "semiannual": "semi-annual", "semi-annually": "semi-annual",
    "half-yearly": "semi-annual", "semi annual": "semi-annual", "half yearly": "semi-annual",
    "biannual": "semi-annual", "2": "semi-annual",
    "annual": "annual", "annually": "annual", "yearly": "annual", "year": "annual", "1": "annual",
}
_TIMING_ALIASES = {
    "advance": "advance", "in advance": "advance", "beginning": "advance", "start": "advance",
    "arrears": "arrears", "in arrears": "arrears", "end": "arrears",
}
_ESCALATION_ALIASES = {
    "none": "none", "no": "none", "flat": "none",
    "fixed": "fixed", "fixed-percentage": "fixed", "fixed percentage": "fixed", "percentage": "fixed",
    "index": "index", "index-linked": "index", "indexed": "index", "cpi": "index",
}

# canonical field → accepted spellings (compared after _compact())
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "contract_id": ("ContractID", "Contract ID"),
    "commencement_date": ("CommencementDate", "Commencement Date", "start_date", "lease_start_date"),
    "non_cancellable_years": ("NonCancellableYears", "Non-cancellable Years", "term_years", "lease_term_years"),
    "fixed_payment": ("FixedPaymentPerPeriod", "Fixed Payment", "fixed_payment_per_period"),
    "payment_frequency": ("PaymentFrequency", "Payment Frequency", "frequency"),
    "payment_timing": ("PaymentTiming", "Payment Timing", "timing"),
    "currency": ("Currency",),
    "ibr_annual": ("IBR_Annual", "IBR Annual", "ibr", "incremental_borrowing_rate"),
    "useful_life_years": ("UsefulLifeYears", "Useful Life Years", "useful_life"),
    "extension_years": ("ExtensionYears", "Extension Term", "extension_term_years"),
    "extension_reasonably_certain": ("ExtensionReasonablyCertain", "extension_certain"),
    "extension_likelihood": ("ExtensionLikelihood", "Extension Likelihood"),
    "extension_payment": ("ExtensionPayment",),
    "extension_growth_rate": ("ExtensionGrowthRate", "extension_growth"),
    "escalation": (),
    "escalation_type": ("EscalationType", "Escalation Type", "escalation_kind"),
    "escalation_rate": ("EscalationRate", "Escalation Rate", "escalation_percent"),
    "escalation_start_period": ("EscalationStartPeriod", "escalation_effective_period"),
    "escalation_interval_periods": ("EscalationIntervalPeriods", "escalation_interval"),
    "base_index": ("BaseIndex", "Base Index", "escalation_base_index"),
    "current_index": ("CurrentIndex", "Current Index", "escalation_current_index"),
    "prepayments": ("Prepayments", "prepayments_before_commencement"),
    "initial_direct_costs": ("InitialDirectCosts", "Initial Direct Costs", "idc"),
    "lease_incentives": ("LeaseIncentives", "Lease Incentives", "incentives"),
    "purchase_option_price": ("PurchaseOptionPrice", "Purchase Option Price"),
    "purchase_option_reasonably_certain": ("PurchaseOptionReasonablyCertain",),
    "residual_value_guarantee": ("ResidualValueGuarantee", "Residual Value Guarantee", "rvg"),
    "lessor_name": ("LessorName", "Lessor Name"),
    "lessee_entity": ("LesseeEntity", "Lessee Entity"),
    "asset_description": ("AssetDescription", "Asset Description"),
    "asset_class": ("AssetClass", "Asset Class"),
    "contract_date": ("ContractDate", "Contract Date"),
    "end_date_original": ("EndDateOriginal", "End Date"),
}

_REQUIRED = (
    "contract_id",
    "commencement_date",
    "non_cancellable_years",
    "fixed_payment",
    "payment_frequency",
    "ibr_annual",
    "useful_life_years",
)
_MONEY_FIELDS = (
    "fixed_payment",
    "extension_payment",
    "prepayments",
    "initial_direct_costs",
    "lease_incentives",
    "purchase_option_price",
    "residual_value_guarantee",
)
_TEXT_FIELDS = ("lessor_name", "lessee_entity", "asset_description", "asset_class")

_escalation_adapter: TypeAdapter = TypeAdapter(EscalationPolicy)
_TAG_ERRORS = {"union_tag_invalid", "union_tag_not_found"}


def _compact(key: str) -> str:
    return re.sub(r"[^a-z0-9]", "", key.lower())


_ALIAS_LOOKUP: dict[str, str] = {}
for _canonical, _aliases in _FIELD_ALIASES.items():
    for _alias in (_canonical, *_aliases):
        _ALIAS_LOOKUP[_compact(_alias)] = _canonical


# ═══════════════════════════════════════════════════════════════════════════
# Scalar parsers (raise ValueError on bad input)
# ═══════════════════════════════════════════════════════════════════════════

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and value.strip().lower() in _EMPTY_TOKENS


def parse_number(value: Any) -> tuple[float, bool]:
    """Parse a locale-invariant number. Returns ``(number, had_percent_sign)``."""
    if isinstance(value, bool):
        raise ValueError("boolean is not a number")
    if isinstance(value, (int, float)):
        number = float(value)
        percent = False
    else:
        text = str(value).strip().replace(" ", "").replace("_", "")
        percent = text.endswith("%")
        if percent:
            text = text[:-1]
        if not text or not _NUMBER_RE.match(text) or text in {"+", "-", "."}:
            raise ValueError(f"not a number: {value!r}")
        number = float(text.replace(",", ""))
    if not math.isfinite(number):
        raise ValueError(f"not a finite number: {value!r}")
    return number, percent


def parse_rate(value: Any) -> float:
    """Parse a percentage-like value into a decimal fraction."""
    number, percent = parse_number(value)
    if percent or number > 1:
        number = number / 100
    return number


def parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return isoparse(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognised date: {value!r}")


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    token = str(value).strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    raise ValueError(f"not a yes/no value: {value!r}")


def _parse_choice(value: Any, aliases: Mapping[str, str]) -> str:
    token = str(value).strip().lower().replace("_", "-")
    if token in aliases:
        return aliases[token]
    token = token.replace("-", " ")
    if token in aliases:
        return aliases[token]
    raise ValueError(f"unknown option: {value!r}")


# ═══════════════════════════════════════════════════════════════════════════
# Record normalizer
# ═══════════════════════════════════════════════════════════════════════════

class _Collector:
    """Accumulates parsed values and issues for one record."""

    def __init__(self, raw: Mapping[str, Any]):
        self.raw: dict[str, Any] = {}
        for key, value in raw.items():
            canonical = _ALIAS_LOOKUP.get(_compact(str(key)))
            if canonical is None:
                continue
            if canonical in self.raw and not _is_empty(self.raw[canonical]):
                continue  # first non-empty spelling wins
            self.raw[canonical] = value
        self.values: dict[str, Any] = {}
        self.issues: list[FieldIssue] = []

    def present(self, name: str) -> bool:
        return name in self.raw and not _is_empty(self.raw[name])

    def issue(self, name: str, code: IssueCode, message: str) -> None:
        self.issues.append(FieldIssue(field=name, code=code, message=message, value=self.raw.get(name)))

    def parse(self, name: str, parser, code: IssueCode) -> Any:
        """Run ``parser`` on the raw value; record ``code`` on failure. None if absent/bad."""
        if not self.present(name):
            return None
        try:
            return parser(self.raw[name])
        except ValueError as exc:
            self.issue(name, code, str(exc))
            return None


def normalize_lease_record(raw: Mapping[str, Any]) -> LeaseTerms:
    """Validate and coerce a raw lease record into ``LeaseTerms``.

    Raises
    ------
    LeaseValidationError
        With every missing / invalid field, never just the first.
    """
    c = _Collector(raw)

    for name in _REQUIRED:
        if not c.present(name):
            c.issue(name, "MissingField", f"{name} is required")

    # --- Identity & text ---
    if c.present("contract_id"):
        c.values["contract_id"] = str(c.raw["contract_id"]).strip()
    c.values["currency"] = str(c.raw["currency"]).strip().upper() if c.present("currency") else DEFAULT_CURRENCY
    for name in _TEXT_FIELDS:
        if c.present(name):
            c.values[name] = str(c.raw[name]).strip()

    # --- Dates ---
    for name in ("commencement_date", "contract_date", "end_date_original"):
        parsed = c.parse(name, parse_date, "InvalidDate")
        if parsed is not None:
            c.values[name] = parsed

    # --- Choices ---
    frequency = c.parse("payment_frequency", lambda v: _parse_choice(v, _FREQUENCY_ALIASES), "InvalidChoice")
    if frequency is not None:
        c.values["payment_frequency"] = frequency
    timing = c.parse("payment_timing", lambda v: _parse_choice(v, _TIMING_ALIASES), "InvalidChoice")
    c.values["payment_timing"] = timing or DEFAULT_PAYMENT_TIMING

    # --- Positive durations ---
    for name in ("non_cancellable_years", "useful_life_years"):
        number = c.parse(name, lambda v: parse_number(v)[0], "InvalidNumber")
        if number is None:
            continue
        if number <= 0:
            c.issue(name, "OutOfRange", f"{name} must be greater than zero")
        else:
            c.values[name] = number

    extension_years = c.parse("extension_years", lambda v: parse_number(v)[0], "InvalidNumber")
    if extension_years is not None:
        if extension_years < 0:
            c.issue("extension_years", "OutOfRange", "extension_years cannot be negative")
        else:
            c.values["extension_years"] = extension_years

    # --- Money ---
    for name in _MONEY_FIELDS:
        number = c.parse(name, lambda v: parse_number(v)[0], "InvalidNumber")
        if number is None:
            continue
        if number < 0:
            c.issue(name, "OutOfRange", f"{name} cannot be negative")
        else:
            c.values[name] = number

    # --- Rates ---
    for name in ("ibr_annual", "extension_likelihood", "extension_growth_rate"):
        rate = c.parse(name, parse_rate, "InvalidNumber")
        if rate is None:
            continue
        if not 0 <= rate <= 1:
            c.issue(name, "OutOfRangeRate", f"{name} must be between 0% and 100%")
        else:
            c.values[name] = rate

    # --- Flags ---
    for name in ("extension_reasonably_certain", "purchase_option_reasonably_certain"):
        flag = c.parse(name, parse_bool, "InvalidChoice")
        if flag is not None:
            c.values[name] = flag

    # --- Escalation ---
    escalation = _normalize_escalation(c, frequency)
    if escalation is not None:
        c.values["escalation"] = escalation

    if c.issues:
        logger.debug("lease record rejected: %s", [i.field for i in c.issues])
        raise LeaseValidationError(c.issues)

    try:
        return LeaseTerms(**c.values)
    except PydanticValidationError as exc:
        raise LeaseValidationError([
            FieldIssue(
                field=str(err["loc"][0]) if err["loc"] else "record",
                code="OutOfRange",
                message=err["msg"],
                value=err.get("input"),
            )
            for err in exc.errors()
        ]) from exc


def _normalize_escalation(c: _Collector, frequency: str | None):
    """Build the escalation variant from a nested value or flat fields."""
    if c.present("escalation") and not isinstance(c.raw["escalation"], str):
        value = c.raw["escalation"]
        if isinstance(value, BaseModel):
            value = value.model_dump()
        elif isinstance(value, Mapping) and not _is_empty(value.get("rate")):
            value = dict(value)
            try:
                value["rate"] = parse_rate(value["rate"])
            except ValueError as exc:
                c.issue("escalation", "InvalidNumber", f"escalation rate: {exc}")
                return None
            if not 0 < value["rate"] <= 1:
                c.issue("escalation", "OutOfRangeRate", "escalation rate must be above 0% and at most 100%")
                return None
        try:
            return _escalation_adapter.validate_python(value)
        except PydanticValidationError as exc:
            err = exc.errors()[0]
            code = "InvalidChoice" if err["type"] in _TAG_ERRORS else "OutOfRange"
            c.issue("escalation", code, str(err["msg"]))
            return None

    if c.present("escalation") and not c.present("escalation_type"):
        c.raw["escalation_type"] = c.raw["escalation"]
    kind = c.parse("escalation_type", lambda v: _parse_choice(v, _ESCALATION_ALIASES), "InvalidChoice")
    if kind is None:
        if c.present("escalation_type"):
            return None
        kind = "fixed" if c.present("escalation_rate") else "none"
    if kind == "none":
        return {"kind": "none"}

    default_start = PERIODS_PER_YEAR.get(frequency or "monthly", 12) + 1
    start = c.parse("escalation_start_period", lambda v: int(parse_number(v)[0]), "InvalidNumber")
    if start is not None and start < 1:
        c.issue("escalation_start_period", "OutOfRange", "escalation_start_period must be at least 1")
        return None
    start = start or default_start

    if kind == "fixed":
        if not c.present("escalation_rate"):
            c.issue("escalation_rate", "MissingField", "escalation_rate is required for fixed escalation")
            return None
        rate = c.parse("escalation_rate", parse_rate, "InvalidNumber")
        if rate is None:
            return None
        if not 0 < rate <= 1:
            c.issue("escalation_rate", "OutOfRangeRate", "escalation_rate must be above 0% and at most 100%")
            return None
        interval = c.parse("escalation_interval_periods", lambda v: int(parse_number(v)[0]), "InvalidNumber")
        if interval is not None and interval < 1:
            c.issue("escalation_interval_periods", "OutOfRange", "escalation_interval_periods must be at least 1")
            return None
        return {"kind": "fixed", "rate": rate, "effective_period": start, "interval_periods": interval}

    # index-linked
    indices: dict[str, float] = {}
    for name in ("base_index", "current_index"):
        if not c.present(name):
            c.issue(name, "MissingField", f"{name} is required for index-linked escalation")
            continue
        number = c.parse(name, lambda v: parse_number(v)[0], "InvalidNumber")
        if number is None:
            continue
        if number <= 0:
            c.issue(name, "OutOfRange", f"{name} must be greater than zero")
            continue
        indices[name] = number
    if len(indices) != 2:
        return None
    return {"kind": "index", "effective_period": start, **indices}
