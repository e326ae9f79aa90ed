"""Record codes and column layouts of the Data Stage export (Anexo 22, M3 records)."""
from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping


class RecordCode(str, Enum):
    """Record types decoded into typed entities; every other code stays raw."""

    GENERAL = "501"
    INVOICE = "505"
    ITEM = "551"

    @classmethod
    def lookup(cls, code: str) -> "RecordCode | None":
        try:
            return cls(code)
        except ValueError:
            return None


# 0-based column positions for each typed record.
GENERAL_COLUMNS: Mapping[str, int] = MappingProxyType(
    {
        "patente": 0,
        "pedimento": 1,
        "seccion": 2,
        "tipo_operacion": 3,
        "clave_documento": 4,
        "rfc": 7,
        "tipo_cambio": 9,
        "fletes": 10,
        "seguros": 11,
        "embalajes": 12,
        "otros_incrementables": 13,
        "peso_bruto": 15,
        "fecha_pago": 30,
    }
)

INVOICE_COLUMNS: Mapping[str, int] = MappingProxyType(
    {
        "patente": 0,
        "pedimento": 1,
        "seccion": 2,
        "fecha_facturacion": 3,
        "numero_factura": 4,
        "term_facturacion": 5,
        "moneda": 6,
        "valor_dolares": 7,
        "valor_moneda_extranjera": 8,
        "proveedor": 12,
        "proveedor_calle": 13,
    }
)

ITEM_COLUMNS: Mapping[str, int] = MappingProxyType(
    {
        "patente": 0,
        "pedimento": 1,
        "seccion": 2,
        "fraccion": 3,
        "secuencia": 4,
        "descripcion": 6,
        "precio_unitario": 7,
        "valor_aduana": 8,
        "valor_comercial": 9,
        "valor_dolares": 10,
        "cantidad_comercial": 11,
        "unidad_medida_comercial": 12,
        "cantidad_tarifa": 13,
        "unidad_medida_tarifa": 14,
    }
)

COLUMN_TABLES: Mapping[RecordCode, Mapping[str, int]] = MappingProxyType(
    {
        RecordCode.GENERAL: GENERAL_COLUMNS,
        RecordCode.INVOICE: INVOICE_COLUMNS,
        RecordCode.ITEM: ITEM_COLUMNS,
    }
)

NUMERIC_FIELDS = frozenset(
    {
        "tipo_cambio",
        "fletes",
        "seguros",
        "embalajes",
        "otros_incrementables",
        "peso_bruto",
        "valor_dolares",
        "valor_moneda_extranjera",
        "precio_unitario",
        "valor_aduana",
        "valor_comercial",
        "cantidad_comercial",
        "cantidad_tarifa",
    }
)

DATA_STAGE_SCHEMAS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "501": (
            "Patente", "Pedimento", "Sección", "Tipo Operación", "Clave Doc", "Fecha Entrada",
            "Fecha Present.", "RFC", "CURP", "Tipo Cambio", "Fletes", "Seguros", "Embalajes",
            "Otros Incr.", "Deducibles", "Peso Bruto", "Medio Transp.", "Medio Arr.", "Medio Sal.",
            "Valor USD", "Valor Aduana", "Valor Com.", "Origen/Destino", "Descargo", "Ult. Partida",
            "Nom. Imp/Exp", "Calle", "No. Ext", "No. Int", "CP", "Ciudad", "Entidad", "Pais",
            "Fecha Pago",
        ),
        "502": (
            "Patente", "Pedimento", "Sección", "RFC Transp.", "CURP Transp.", "Nombre Transportista",
            "País", "ID Transporte", "Domicilio Fiscal", "Ciudad", "Estado",
        ),
        "503": ("Patente", "Pedimento", "Sección", "Tipo Guía", "No. Guía"),
        "504": ("Patente", "Pedimento", "Sección", "No. Contenedor", "Tipo Contenedor"),
        "505": (
            "Patente", "Pedimento", "Sección", "Fecha Fact.", "No. Factura", "Incoterm", "Moneda",
            "Valor USD", "Valor Mon. Ext.", "País Fact.", "Entidad Fed.", "ID Fiscal Prov.",
            "Proveedor", "Calle", "No. Ext", "No. Int", "Ciudad", "Municipio", "CP", "País Prov.",
        ),
        "506": ("Patente", "Pedimento", "Sección", "Tipo Fecha", "Fecha"),
        "507": (
            "Patente", "Pedimento", "Sección", "Clave Identif.", "Complemento 1", "Complemento 2",
            "Complemento 3",
        ),
        "509": ("Patente", "Pedimento", "Sección", "Contribución", "Tasa", "Tipo Tasa"),
        "510": ("Patente", "Pedimento", "Sección", "Contribución", "Forma Pago", "Importe"),
        "511": ("Patente", "Pedimento", "Sección", "Observaciones"),
        "551": (
            "Patente", "Pedimento", "Sección", "Fracción", "Secuencia", "Subdiv.", "Descripción",
            "Precio Unit.", "Valor Aduana", "Valor Com.", "Valor USD", "Cant. Com.", "UMC",
            "Cant. Tarifa", "UMT", "País Vendedor", "País Origen", "País Comp.", "Obs.",
        ),
        "553": (
            "Patente", "Pedimento", "Sección", "Fracción", "Secuencia", "Clave Permiso",
            "Firma Descargo", "No. Permiso", "Valor Com.", "Cantidad",
        ),
        "554": (
            "Patente", "Pedimento", "Sección", "Fracción", "Secuencia", "Clave Identif.",
            "Caso", "Complemento 1", "Complemento 2", "Complemento 3",
        ),
        "556": (
            "Patente", "Pedimento", "Sección", "Fracción", "Secuencia", "Contribución",
            "Forma Pago", "Importe", "Tipo Tasa", "Tasa",
        ),
        "557": ("Patente", "Pedimento", "Sección", "Fracción", "Secuencia", "Observaciones"),
        "701": (
            "Patente Original", "Pedimento Original", "Sección Original", "Clave Doc Orig.",
            "Fecha Pago Orig.", "Patente Rect.", "Pedimento Rect.", "Sección Rect.",
            "Clave Doc Rect.", "Fecha Pago Rect.",
        ),
    }
)

RECORD_DESCRIPTIONS: Mapping[str, str] = MappingProxyType(
    {
        "501": "Datos Generales",
        "502": "Transporte",
        "503": "Guías",
        "504": "Contenedores",
        "505": "Facturas",
        "506": "Fechas",
        "507": "Casos (Identificadores)",
        "508": "Cuentas Aduaneras",
        "509": "Tasas (Info)",
        "510": "Contribuciones Globales",
        "511": "Observaciones",
        "512": "Descargos",
        "520": "Destinatarios",
        "551": "Partidas (Mercancías)",
        "553": "Permisos (Partida)",
        "554": "Identificadores (Partida)",
        "556": "Contribuciones (Partida)",
        "557": "Observaciones (Partida)",
        "558": "Regulaciones y Restricciones",
        "701": "Rectificaciones",
    }
)


def describe(code: str) -> str:
    return RECORD_DESCRIPTIONS.get(code, "Desconocido")


def column_names(code: str, width: int) -> list[str]:
    """Schema labels for ``code`` padded or truncated to ``width`` columns."""
    schema = list(DATA_STAGE_SCHEMAS.get(code, ()))
    if len(schema) >= width:
        return schema[:width]
    return schema + [f"col_{idx}" for idx in range(len(schema), width)]
