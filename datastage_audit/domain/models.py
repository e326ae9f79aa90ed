"""Domain models for Data Stage declarations and commercial invoices.

These dataclasses capture the normalized shape of the 501/505/551 records
once decoded from an archive, the aggregate declaration built from them, and
the commercial invoice lines the audit compares against.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class DeclarationKey:
    """Composite identity of a declaration section."""

    patente: str
    pedimento: str
    seccion: str

    def __str__(self) -> str:
        return f"{self.patente}-{self.pedimento}-{self.seccion}"


@dataclass(frozen=True)
class RawRecordFile:
    """Tokenized rows of one archive entry, kept for raw inspection."""

    file_name: str
    record_code: str
    rows: tuple[tuple[str, ...], ...]


@dataclass(frozen=True)
class GeneralData:
    """501 record: declaration header."""

    patente: str
    pedimento: str
    seccion: str
    tipo_operacion: str
    clave_documento: str
    rfc: str
    tipo_cambio: Decimal
    fletes: Decimal
    seguros: Decimal
    embalajes: Decimal
    otros_incrementables: Decimal
    peso_bruto: Decimal
    fecha_pago: str

    @property
    def key(self) -> DeclarationKey:
        return DeclarationKey(self.patente, self.pedimento, self.seccion)

    @property
    def incrementables(self) -> Decimal:
        return self.fletes + self.seguros + self.embalajes + self.otros_incrementables


@dataclass(frozen=True)
class InvoiceData:
    """505 record: invoice declared for a section."""

    patente: str
    pedimento: str
    seccion: str
    fecha_facturacion: str
    numero_factura: str
    term_facturacion: str
    moneda: str
    valor_dolares: Decimal
    valor_moneda_extranjera: Decimal
    proveedor: str
    proveedor_calle: str

    @property
    def key(self) -> DeclarationKey:
        return DeclarationKey(self.patente, self.pedimento, self.seccion)


@dataclass(frozen=True)
class ItemData:
    """551 record: declared line item (partida)."""

    patente: str
    pedimento: str
    seccion: str
    fraccion: str
    secuencia: str
    descripcion: str
    precio_unitario: Decimal
    valor_aduana: Decimal
    valor_comercial: Decimal
    valor_dolares: Decimal
    cantidad_comercial: Decimal
    unidad_medida_comercial: str
    cantidad_tarifa: Decimal
    unidad_medida_tarifa: str
    # Only populated by extraction paths that can cross-reference invoices.
    invoice_no: str | None = None
    part_number: str | None = None

    @property
    def key(self) -> DeclarationKey:
        return DeclarationKey(self.patente, self.pedimento, self.seccion)


@dataclass
class DeclarationRecord:
    """Aggregate root: one header with the invoices and items linked to it."""

    general: GeneralData
    items: list[ItemData] = field(default_factory=list)
    invoices: list[InvoiceData] = field(default_factory=list)
    total_value_usd: Decimal = Decimal("0")

    @property
    def key(self) -> DeclarationKey:
        return self.general.key

    @property
    def id(self) -> str:
        return str(self.key)

    def add_invoice(self, invoice: InvoiceData) -> None:
        self.invoices.append(invoice)

    def add_item(self, item: ItemData) -> None:
        self.items.append(item)
        self.total_value_usd += item.valor_dolares


@dataclass(frozen=True)
class CommercialInvoiceItem:
    """Line item of a supplier's commercial invoice."""

    invoice_no: str
    part_no: str
    qty: Decimal
    total_amount: Decimal
    unit_price: Decimal = Decimal("0")
    date: str = ""
    item: str = ""
    model: str = ""
    english_name: str = ""
    spanish_description: str = ""
    hts: str = ""
    um: str = ""
    net_weight: Decimal = Decimal("0")
    regimen: str = ""
    currency: str | None = None
