from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class RiskTier(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class VehicleRecord(BaseModel):
    """
    Vehicle identity as returned by the plate/FIPE registry lookup.

    Accepts both English field names and the registry's Portuguese keys.
    Optional fields left empty are normalized to None so the report can omit them.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    brand: str = Field(validation_alias=AliasChoices("brand", "marca"))
    model: str = Field(validation_alias=AliasChoices("model", "modelo"))
    year: int = Field(validation_alias=AliasChoices("year", "ano", "model_year"))
    color: Optional[str] = Field(default=None, validation_alias=AliasChoices("color", "cor"))
    fuel_type: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("fuel_type", "fuelType", "combustivel")
    )
    chassis: Optional[str] = Field(default=None, validation_alias=AliasChoices("chassis", "chassi"))
    municipality: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("municipality", "municipio")
    )
    state: Optional[str] = Field(default=None, validation_alias=AliasChoices("state", "uf", "region"))
    legal_status: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("legal_status", "legalStatus", "situacao")
    )
    reference_price: str = Field(
        default="", validation_alias=AliasChoices("reference_price", "referencePrice", "valor_fipe")
    )
    reference_price_code: str = Field(
        default="",
        validation_alias=AliasChoices("reference_price_code", "referencePriceCode", "codigo_fipe"),
    )
    plate: str = Field(default="", validation_alias=AliasChoices("plate", "placa"))

    @field_validator(
        "color",
        "fuel_type",
        "chassis",
        "municipality",
        "state",
        "legal_status",
        mode="before",
    )
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("brand", "model", "reference_price", "reference_price_code", "plate", mode="before")
    @classmethod
    def _strip_text(cls, value: Optional[str]) -> str:
        return str(value or "").strip()


class ComponentFinding(BaseModel):
    """One inspected component: what it is, how it looks, what we concluded."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    name: str = Field(validation_alias=AliasChoices("name", "nome"))
    condition: str = Field(default="", validation_alias=AliasChoices("condition", "estado"))
    conclusion: str = Field(default="", validation_alias=AliasChoices("conclusion", "conclusao"))


class Synthesis(BaseModel):
    """Overall analysis result; final_conclusion drives the risk tier."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    summary: str = Field(default="", validation_alias=AliasChoices("summary", "resumo"))
    repaint_locations: str = Field(
        default="", validation_alias=AliasChoices("repaint_locations", "repintura_em")
    )
    filler_locations: str = Field(default="", validation_alias=AliasChoices("filler_locations", "massa_em"))
    alignment_status: str = Field(
        default="", validation_alias=AliasChoices("alignment_status", "alinhamento_comprometido")
    )
    glass_replacement_status: str = Field(
        default="", validation_alias=AliasChoices("glass_replacement_status", "vidros_trocados")
    )
    lower_structure_status: str = Field(
        default="", validation_alias=AliasChoices("lower_structure_status", "estrutura_inferior")
    )
    structure_ok: bool = Field(default=True, validation_alias=AliasChoices("structure_ok", "estrutura_ok"))
    final_conclusion: str = Field(
        default="", validation_alias=AliasChoices("final_conclusion", "finalConclusion", "conclusao_final")
    )
    pending_maintenance: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("pending_maintenance", "manutencoes_pendentes"),
    )

    @field_validator("pending_maintenance", mode="before")
    @classmethod
    def _clean_maintenance(cls, value: Optional[List[str]]) -> List[str]:
        if value is None:
            return []
        return [str(v).strip() for v in value if str(v or "").strip()]


class InspectionReportRequest(BaseModel):
    """Request body for POST /inspection-report and POST /inspection-report/preview."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    vehicle: VehicleRecord = Field(validation_alias=AliasChoices("vehicle", "veiculo"))
    components: List[ComponentFinding] = Field(
        default_factory=list, validation_alias=AliasChoices("components", "componentes")
    )
    synthesis: Synthesis = Field(validation_alias=AliasChoices("synthesis", "sintese"))
    image_urls: List[str] = Field(
        default_factory=list, validation_alias=AliasChoices("image_urls", "imageUrls", "images")
    )
    odometer: Optional[int] = Field(
        default=None, ge=0, validation_alias=AliasChoices("odometer", "quilometragem")
    )

    @field_validator("odometer", mode="before")
    @classmethod
    def _parse_odometer(cls, value):
        """Accept '85.000 km' style strings from the form; digits only are kept."""
        if value is None or isinstance(value, int):
            return value
        digits = "".join(ch for ch in str(value) if ch.isdigit())
        return int(digits) if digits else None


class ValuationRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    reference_price: str = Field(validation_alias=AliasChoices("reference_price", "referencePrice", "valor_fipe"))
    odometer: Optional[int] = Field(default=None, ge=0)
    model: str = ""
    year: Optional[int] = None


class ValuationResponse(BaseModel):
    reference_price: str
    offer_price: str
    express_evaluation: str
