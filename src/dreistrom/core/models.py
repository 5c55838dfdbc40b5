"""Data models for the dreistrom tax engine.

Entities (DepreciableAsset, AllocationRatio, InvoiceSequenceCounter) carry
their own invariants. Result types are frozen: they are recomputed from
inputs on every request and never mutated after construction.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from .exceptions import (
    ConfigurationError,
    DisposalBeforeAcquisitionError,
    InvalidAllocationError,
    InvalidUsefulLifeError,
    UnsupportedStreamError,
)
from .money import ZERO, quantize_cents


class IncomeStream(str, Enum):
    EMPLOYMENT = "employment"  # § 19 EStG
    FREIBERUF = "freiberuf"    # § 18 EStG
    GEWERBE = "gewerbe"        # § 15 EStG


class InvoiceStream(str, Enum):
    FREIBERUF = "freiberuf"
    GEWERBE = "gewerbe"

    @property
    def prefix(self) -> str:
        return "FR" if self is InvoiceStream.FREIBERUF else "GW"

    @classmethod
    def from_income_stream(cls, stream: IncomeStream) -> "InvoiceStream":
        """Employment income is paid via payroll and never invoiced."""
        if stream is IncomeStream.EMPLOYMENT:
            raise UnsupportedStreamError("Employment income is not invoiced")
        return cls(stream.value)


class VatTreatment(str, Enum):
    REGULAR = "regular"                # Regelbesteuerung
    REVERSE_CHARGE = "reverse_charge"  # § 13b UStG
    SMALL_BUSINESS = "small_business"  # § 19 UStG
    INTRA_EU = "intra_eu"              # innergemeinschaftliche Leistung
    THIRD_COUNTRY = "third_country"    # Drittland, § 3a UStG


class ClientType(str, Enum):
    B2B = "b2b"
    B2C = "b2c"


@dataclass(frozen=True)
class AllocationRatio:
    """Three-way split of a shared cost. Percentages must sum to exactly 100."""
    freiberuf_pct: int
    gewerbe_pct: int
    personal_pct: int

    def __post_init__(self):
        parts = (self.freiberuf_pct, self.gewerbe_pct, self.personal_pct)
        if any(p < 0 or p > 100 for p in parts):
            raise InvalidAllocationError(
                f"Allocation percentages must be between 0 and 100, got: {parts}"
            )
        if sum(parts) != 100:
            raise InvalidAllocationError(
                f"Allocation percentages must sum to 100, got: {sum(parts)}"
            )

    @property
    def business_pct(self) -> int:
        return self.freiberuf_pct + self.gewerbe_pct


@dataclass
class AllocationRule:
    """A named, reusable allocation ratio (e.g. "Laptop", "Home office")."""
    name: str
    freiberuf_pct: int
    gewerbe_pct: int
    personal_pct: int
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def ratio(self) -> AllocationRatio:
        return AllocationRatio(self.freiberuf_pct, self.gewerbe_pct, self.personal_pct)


@dataclass(frozen=True)
class DepreciableAsset:
    """A capital asset written off straight-line over its useful life (AfA)."""
    name: str
    acquisition_date: date
    net_cost: Decimal
    useful_life_months: int
    ratio: Optional[AllocationRatio] = None
    expense_id: Optional[int] = None
    disposal_date: Optional[date] = None
    id: Optional[int] = None

    def __post_init__(self):
        if self.net_cost < 0:
            raise ConfigurationError(f"Net cost cannot be negative, got: {self.net_cost}")
        if self.useful_life_months <= 0:
            raise InvalidUsefulLifeError(
                f"Useful life must be at least one month, got: {self.useful_life_months}"
            )
        if self.disposal_date is not None and self.disposal_date < self.acquisition_date:
            raise DisposalBeforeAcquisitionError(
                "Disposal date cannot be before acquisition date"
            )

    @property
    def annual_amount(self) -> Decimal:
        """Full-year straight-line AfA (cost × 12 / life months)."""
        return quantize_cents(self.net_cost * 12 / Decimal(self.useful_life_months))

    @property
    def is_disposed(self) -> bool:
        return self.disposal_date is not None


@dataclass
class InvoiceSequenceCounter:
    """Last issued invoice ordinal for one (stream, fiscal year) key."""
    stream: InvoiceStream
    fiscal_year: int
    last_issued: int = 0

    @property
    def next_ordinal(self) -> int:
        return self.last_issued + 1

    def advance(self) -> int:
        self.last_issued += 1
        return self.last_issued


@dataclass(frozen=True)
class InvoiceVatEntry:
    """VAT-relevant facts of one issued invoice."""
    stream: InvoiceStream
    issue_date: date
    vat_amount: Decimal
    treatment: VatTreatment = VatTreatment.REGULAR


@dataclass(frozen=True)
class ExpenseVatEntry:
    """VAT-relevant facts of one expense: gross amount, date, split and rate."""
    expense_date: date
    gross_amount: Decimal
    ratio: Optional[AllocationRatio] = None
    vat_rate: Decimal = Decimal("19")


@dataclass(frozen=True)
class DeductionBreakdown:
    business_expenses_freiberuf: Decimal
    business_expenses_gewerbe: Decimal
    werbungskostenpauschale: Decimal
    sonderausgabenpauschale: Decimal
    total_deductions: Decimal


@dataclass(frozen=True)
class TaxCalculationResult:
    """Income tax assessment per § 32a EStG for one year. All amounts in EUR."""
    tax_year: int
    employment_income: Decimal
    freiberuf_income: Decimal
    gewerbe_income: Decimal
    total_gross_income: Decimal
    deductions: DeductionBreakdown
    taxable_income: Decimal
    income_tax: Decimal
    solidaritaetszuschlag: Decimal
    total_tax: Decimal
    marginal_rate: Decimal
    effective_rate: Decimal


@dataclass(frozen=True)
class TradeTaxResult:
    """Gewerbesteuer assessment including the § 35 EStG credit."""
    profit: Decimal
    allowance: Decimal
    taxable_profit: Decimal
    assessment_base: Decimal       #: Steuermessbetrag
    hebesatz: int
    trade_tax: Decimal
    credit: Decimal                #: § 35 EStG Anrechnung
    net_burden: Decimal


@dataclass(frozen=True)
class DepreciationScheduleEntry:
    year: int
    amount: Decimal
    remaining_value: Decimal       #: book value on Dec 31 of `year`


@dataclass(frozen=True)
class AllocationSplit:
    freiberuf: Decimal = ZERO
    gewerbe: Decimal = ZERO
    personal: Decimal = ZERO

    @property
    def business(self) -> Decimal:
        return self.freiberuf + self.gewerbe


@dataclass(frozen=True)
class StreamDepreciationSummary:
    freiberuf: Decimal
    gewerbe: Decimal
    personal: Decimal
    total: Decimal                 #: includes assets without an allocation ratio


@dataclass(frozen=True)
class VatSummary:
    """Umsatzsteuer / Vorsteuer netting for one filing period."""
    output_vat: Decimal
    freiberuf_output_vat: Decimal
    gewerbe_output_vat: Decimal
    input_vat: Decimal
    freiberuf_input_vat: Decimal
    gewerbe_input_vat: Decimal
    net_payable: Decimal           #: negative = refund position
    kleinunternehmer: bool = False

    @classmethod
    def zero(cls) -> "VatSummary":
        z = Decimal("0.00")
        return cls(z, z, z, z, z, z, z, kleinunternehmer=True)

    @property
    def per_stream(self) -> dict[InvoiceStream, dict[str, Decimal]]:
        return {
            InvoiceStream.FREIBERUF: {
                "output_vat": self.freiberuf_output_vat,
                "input_vat": self.freiberuf_input_vat,
            },
            InvoiceStream.GEWERBE: {
                "output_vat": self.gewerbe_output_vat,
                "input_vat": self.gewerbe_input_vat,
            },
        }


@dataclass(frozen=True)
class EuerResult:
    """Einnahmen-Überschuss-Rechnung (§ 4 Abs. 3 EStG) for one stream."""
    tax_year: int
    stream: IncomeStream
    total_income: Decimal
    direct_expenses: Decimal
    depreciation: Decimal
    total_expenses: Decimal
    profit: Decimal


@dataclass(frozen=True)
class AnlageN:
    bruttoarbeitslohn: Decimal
    lohnsteuer: Decimal
    solidaritaetszuschlag: Decimal
    werbungskostenpauschale: Decimal


@dataclass(frozen=True)
class AnlageS:
    einnahmen: Decimal
    betriebsausgaben: Decimal
    afa: Decimal
    gewinn: Decimal


@dataclass(frozen=True)
class AnlageG:
    einnahmen: Decimal
    betriebsausgaben: Decimal
    afa: Decimal
    gewinn: Decimal
    gewerbesteuer: Decimal
    paragraph35_anrechnung: Decimal


@dataclass(frozen=True)
class AnlageVorsorgeaufwand:
    krankenversicherung: Decimal
    pflegeversicherung: Decimal
    rentenversicherung: Decimal
    arbeitslosenversicherung: Decimal
    gesamt: Decimal


@dataclass(frozen=True)
class AnnualTaxPackage:
    tax_year: int
    anlage_n: AnlageN
    anlage_s: AnlageS
    anlage_g: AnlageG
    euer_freiberuf: EuerResult
    euer_gewerbe: EuerResult
    vorsorgeaufwand: AnlageVorsorgeaufwand
    tax_calculation: TaxCalculationResult
    trade_tax: TradeTaxResult
    depreciation: StreamDepreciationSummary = field(
        default_factory=lambda: StreamDepreciationSummary(ZERO, ZERO, ZERO, ZERO)
    )
